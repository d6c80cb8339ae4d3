"""
Date utilities.

Trade dates are stored as ISO ``YYYY-MM-DD`` strings.  These helpers
turn them into calendar dates and month keys for bucketing.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union
import pandas as pd


def month_key(trade_date: Optional[str]) -> str:
    """Return the ``YYYY-MM`` prefix of an ISO date string.

    Malformed or missing dates are not rejected; they produce whatever
    prefix they have, so bad records end up in their own bucket.
    """
    return (trade_date or "")[:7]


def parse_date(value: Union[str, date, pd.Timestamp]) -> date:
    """Parse an ISO date string (or date-like object) into a `datetime.date`."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def today_iso() -> str:
    return date.today().isoformat()


def days_between(start: Union[str, date], end: Union[str, date, None] = None) -> int:
    """Return the absolute number of whole days between two dates.

    `end` defaults to today.
    """
    end_date = parse_date(end) if end is not None else date.today()
    return abs((end_date - parse_date(start)).days)
