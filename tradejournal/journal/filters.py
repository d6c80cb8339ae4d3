"""
Trade list filters used by the trade history and positions views.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import TradeRecord


def closed_trades(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    return [t for t in trades if t.is_closed]


def open_positions(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    return [t for t in trades if t.is_open]


def filter_trades(
    trades: Iterable[TradeRecord],
    search: Optional[str] = None,
    strategy: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    closed_only: bool = True,
) -> List[TradeRecord]:
    """Filter the trade history.

    Parameters
    ----------
    search : str, optional
        Case-insensitive substring matched against symbol and notes.
    strategy : str, optional
        Exact strategy label.
    start_date, end_date : str, optional
        Inclusive ISO date bounds.
    closed_only : bool
        Drop open positions, as the trade history view does.
    """
    result = closed_trades(trades) if closed_only else list(trades)
    if search:
        needle = search.lower()
        result = [
            t for t in result
            if needle in t.symbol.lower() or needle in (t.notes or "").lower()
        ]
    if strategy:
        result = [t for t in result if t.strategy == strategy]
    if start_date:
        result = [t for t in result if t.date >= start_date]
    if end_date:
        result = [t for t in result if t.date <= end_date]
    return result
