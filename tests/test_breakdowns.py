import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.analytics.engine import (
    AnalyticsEngine,
    equity_curve,
    monthly_breakdown,
    strategy_breakdown,
    symbol_breakdown,
)
from tradejournal.journal.models import TradeRecord

import unittest


def _trade(pnl, date="2024-01-05", symbol="AAPL", strategy="Breakout", rr=None):
    return TradeRecord(
        id=None, date=date, symbol=symbol, type="long", quantity=1.0, entry_price=1.0,
        exit_price=1.0 if pnl else 0.0, profit_loss=pnl, strategy=strategy, risk_reward_ratio=rr,
    )


class TestMonthlyBreakdown(unittest.TestCase):
    def test_same_month_collapses_into_one_bucket(self) -> None:
        buckets = monthly_breakdown([_trade(30, "2024-01-05"), _trade(-10, "2024-01-20")])
        self.assertEqual(len(buckets), 1)
        bucket = buckets[0]
        self.assertEqual(bucket.month, "2024-01")
        self.assertEqual(bucket.trade_count, 2)
        self.assertAlmostEqual(bucket.profit, 30.0)
        self.assertAlmostEqual(bucket.loss, 10.0)
        self.assertAlmostEqual(bucket.net_pl, 20.0)

    def test_months_sorted_newest_first(self) -> None:
        trades = [_trade(1, "2023-12-31"), _trade(1, "2024-02-01"), _trade(1, "2024-01-15")]
        self.assertEqual([b.month for b in monthly_breakdown(trades)], ["2024-02", "2024-01", "2023-12"])

    def test_open_positions_are_counted(self) -> None:
        bucket = monthly_breakdown([_trade(0, "2024-03-01"), _trade(5, "2024-03-02")])[0]
        self.assertEqual(bucket.trade_count, 2)
        self.assertAlmostEqual(bucket.net_pl, 5.0)

    def test_missing_date_lands_in_empty_bucket(self) -> None:
        buckets = monthly_breakdown([_trade(5, ""), _trade(5, "2024-01-01")])
        self.assertIn("", [b.month for b in buckets])


class TestSymbolAndStrategyBreakdown(unittest.TestCase):
    def test_symbol_buckets_sorted_by_net_pl(self) -> None:
        trades = [
            _trade(10, symbol="AAPL"), _trade(-30, symbol="TSLA"),
            _trade(50, symbol="MSFT"), _trade(-5, symbol="AAPL"), _trade(0, symbol="AAPL"),
        ]
        buckets = symbol_breakdown(trades)
        self.assertEqual([b.symbol for b in buckets], ["MSFT", "AAPL", "TSLA"])
        aapl = buckets[1]
        self.assertEqual(aapl.trade_count, 3)
        self.assertEqual(aapl.win_count, 1)
        self.assertEqual(aapl.loss_count, 1)
        self.assertEqual(aapl.win_rate, 33.3)
        self.assertAlmostEqual(aapl.net_pl, 5.0)

    def test_symbols_are_case_sensitive(self) -> None:
        buckets = symbol_breakdown([_trade(1, symbol="aapl"), _trade(1, symbol="AAPL")])
        self.assertEqual(len(buckets), 2)

    def test_top_symbols_limited(self) -> None:
        trades = [_trade(i + 1, symbol=f"S{i:02d}") for i in range(12)]
        snap = AnalyticsEngine(top_symbols=10).compute(trades)
        self.assertEqual(len(snap.symbols), 12)
        self.assertEqual(len(snap.top_symbols), 10)
        self.assertEqual(snap.top_symbols[0].symbol, "S11")

    def test_untagged_strategy_and_mean_rr(self) -> None:
        trades = [
            _trade(20, strategy="Breakout", rr=2.0),
            _trade(-10, strategy="Breakout", rr=1.0),
            _trade(5, strategy="Breakout"),
            _trade(3, strategy=""),
            _trade(-1, strategy=None),
        ]
        buckets = {b.strategy: b for b in strategy_breakdown(trades)}
        self.assertEqual(set(buckets), {"Breakout", "Untagged"})
        breakout = buckets["Breakout"]
        self.assertAlmostEqual(breakout.avg_rr, 1.5)
        self.assertEqual(breakout.avg_rr_display, "1.50")
        untagged = buckets["Untagged"]
        self.assertEqual(untagged.trade_count, 2)
        self.assertIsNone(untagged.avg_rr)
        self.assertEqual(untagged.avg_rr_display, "-")

    def test_strategy_buckets_sorted_by_net_pl(self) -> None:
        trades = [_trade(-5, strategy="Scalp"), _trade(15, strategy="Swing"), _trade(2, strategy="News")]
        self.assertEqual([b.strategy for b in strategy_breakdown(trades)], ["Swing", "News", "Scalp"])


class TestEquityCurve(unittest.TestCase):
    def test_cumulative_in_date_order(self) -> None:
        trades = [_trade(10, "2024-02-01"), _trade(-4, "2024-01-01"), _trade(6, "2024-03-01")]
        points = equity_curve(trades)
        self.assertEqual([p.date for p in points], ["2024-01-01", "2024-02-01", "2024-03-01"])
        self.assertEqual([p.equity for p in points], [-4.0, 6.0, 12.0])


if __name__ == '__main__':
    unittest.main()
