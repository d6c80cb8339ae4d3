import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.analytics.engine import monthly_breakdown
from tradejournal.analytics.sorting import ASC, DESC, SortState, compare_values, sort_records
from tradejournal.journal.models import TradeRecord

import unittest


ROWS = [
    {"symbol": "msft", "net": 12.0},
    {"symbol": "aapl", "net": -3.5},
    {"symbol": "tsla", "net": 40.0},
    {"symbol": "amzn", "net": 0.25},
]


class TestSortRecords(unittest.TestCase):
    def test_numeric_ascending_and_descending(self) -> None:
        asc = sort_records(ROWS, "net", ASC)
        self.assertEqual([r["net"] for r in asc], [-3.5, 0.25, 12.0, 40.0])
        desc = sort_records(ROWS, "net", DESC)
        self.assertEqual(desc, list(reversed(asc)))

    def test_string_column(self) -> None:
        asc = sort_records(ROWS, "symbol", ASC)
        self.assertEqual([r["symbol"] for r in asc], ["aapl", "amzn", "msft", "tsla"])

    def test_string_column_ignores_case(self) -> None:
        rows = [{"s": "Banana"}, {"s": "apple"}, {"s": "cherry"}]
        self.assertEqual([r["s"] for r in sort_records(rows, "s", ASC)], ["apple", "Banana", "cherry"])
        self.assertEqual([r["s"] for r in sort_records(rows, "s", DESC)], ["cherry", "Banana", "apple"])

    def test_case_only_differences_still_ordered(self) -> None:
        self.assertNotEqual(compare_values("abc", "ABC"), 0)
        self.assertEqual(compare_values("abc", "ABC"), -compare_values("ABC", "abc"))

    def test_input_is_not_modified(self) -> None:
        before = list(ROWS)
        sort_records(ROWS, "net", DESC)
        self.assertEqual(ROWS, before)

    def test_stable_for_equal_keys_in_both_directions(self) -> None:
        rows = [{"k": 1, "n": "a"}, {"k": 0, "n": "b"}, {"k": 1, "n": "c"}, {"k": 0, "n": "d"}]
        self.assertEqual([r["n"] for r in sort_records(rows, "k", ASC)], ["b", "d", "a", "c"])
        self.assertEqual([r["n"] for r in sort_records(rows, "k", DESC)], ["a", "c", "b", "d"])

    def test_unparsable_values_count_as_zero_in_numeric_columns(self) -> None:
        rows = [{"v": 5}, {"v": "junk"}, {"v": -2}, {"v": None}]
        self.assertEqual([r["v"] for r in sort_records(rows, "v", ASC)], [-2, "junk", None, 5])

    def test_mixed_non_numeric_values_compare_equal(self) -> None:
        self.assertEqual(compare_values("abc", None), 0)
        self.assertEqual(compare_values(None, ["x"]), 0)
        rows = [{"v": "b"}, {"v": None}, {"v": "a"}]
        # no pair is both-strings except (b, a); the result stays a valid permutation
        self.assertEqual(len(sort_records(rows, "v", ASC)), 3)

    def test_attribute_records(self) -> None:
        trades = [
            TradeRecord(id="1", date="2024-02-01", symbol="B", type="long", quantity=1, entry_price=1, profit_loss=5),
            TradeRecord(id="2", date="2024-01-01", symbol="A", type="long", quantity=1, entry_price=1, profit_loss=-5),
        ]
        self.assertEqual([t.id for t in sort_records(trades, "date", ASC)], ["2", "1"])
        buckets = monthly_breakdown(trades)
        self.assertEqual([b.month for b in sort_records(buckets, "net_pl", ASC)], ["2024-01", "2024-02"])

    def test_unknown_direction(self) -> None:
        with self.assertRaises(ValueError):
            sort_records(ROWS, "net", "sideways")


class TestSortState(unittest.TestCase):
    def test_toggle(self) -> None:
        state = SortState("month", DESC)
        state = state.toggle("month")
        self.assertEqual(state, SortState("month", ASC))
        state = state.toggle("month")
        self.assertEqual(state, SortState("month", DESC))
        state = state.toggle("net_pl")
        self.assertEqual(state, SortState("net_pl", ASC))

    def test_apply(self) -> None:
        self.assertEqual(SortState("net", DESC).apply(ROWS)[0]["symbol"], "tsla")


if __name__ == '__main__':
    unittest.main()
