"""
Column sorting for tabular results.

Trade lists and breakdown tables are re-ordered by whatever column the
user picks.  Records may be dictionaries or objects with attributes
(dataclasses such as `TradeRecord` or the analytics buckets).
"""

from __future__ import annotations

import locale
import math
from dataclasses import dataclass
from functools import cmp_to_key
from numbers import Number
from typing import Any, Iterable, List, Mapping

ASC = "asc"
DESC = "desc"


def _field(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _as_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def compare_values(a: Any, b: Any) -> int:
    """Ascending three-way comparison of two column values.

    If either side is numeric both are compared as floats, with
    unparsable values counting as 0.  Two strings are compared
    case-insensitively first, so ``apple`` sorts before ``Banana``, with
    ties broken on the exact string.  Any other combination compares
    equal.
    """
    if _is_number(a) or _is_number(b):
        x, y = _as_float(a), _as_float(b)
        return (x > y) - (x < y)
    if isinstance(a, str) and isinstance(b, str):
        return locale.strcoll(a.casefold(), b.casefold()) or locale.strcoll(a, b)
    return 0


def sort_records(records: Iterable[Any], key: str, direction: str = ASC) -> List[Any]:
    """Return a new list of `records` ordered by the `key` column.

    The sort is stable in both directions: records whose values compare
    equal keep their input order.
    """
    if direction not in (ASC, DESC):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    sign = 1 if direction == ASC else -1

    def _cmp(a: Any, b: Any) -> int:
        return sign * compare_values(_field(a, key), _field(b, key))

    return sorted(records, key=cmp_to_key(_cmp))


@dataclass(frozen=True)
class SortState:
    """Current sort column and direction of a table."""
    key: str
    direction: str = ASC

    def toggle(self, key: str) -> "SortState":
        """Select a column: clicking the ascending column flips it to
        descending, anything else sorts ascending."""
        if key == self.key and self.direction == ASC:
            return SortState(key, DESC)
        return SortState(key, ASC)

    def apply(self, records: Iterable[Any]) -> List[Any]:
        return sort_records(records, self.key, self.direction)
