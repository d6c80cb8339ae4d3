"""
Performance analytics.

This module turns the flat list of journal entries into the statistics
shown to the trader: aggregate performance metrics, the equity curve,
and monthly, per-symbol and per-strategy breakdowns.  Every figure is
recomputed from scratch on each call; nothing here keeps state between
calls or mutates its input.

Open positions carry a profit/loss of zero, so they count towards the
number of trades but are neither wins nor losses.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, asdict, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..journal.models import TradeRecord, LONG, SHORT, normalize_strategy
from ..utils.timeutils import month_key


logger = logging.getLogger(__name__)

INFINITE_PROFIT_FACTOR = math.inf


@dataclass
class EquityPoint:
    """Cumulative realized P&L after a trade."""
    date: str
    equity: float


@dataclass
class MonthlyBucket:
    month: str
    trade_count: int
    profit: float
    loss: float
    net_pl: float


@dataclass
class SymbolBucket:
    symbol: str
    trade_count: int
    profit: float
    loss: float
    net_pl: float
    win_count: int
    loss_count: int
    win_rate: float


@dataclass
class StrategyBucket:
    strategy: str
    trade_count: int
    profit: float
    loss: float
    net_pl: float
    win_count: int
    loss_count: int
    win_rate: float
    avg_rr: Optional[float] = None

    @property
    def avg_rr_display(self) -> str:
        return "-" if self.avg_rr is None else f"{self.avg_rr:.2f}"


@dataclass
class AnalyticsSnapshot:
    """Everything derived from one pass over the trade history.

    Monetary values are kept unrounded; `win_rate`, `long_win_rate`,
    `short_win_rate` and the bucket win rates are percentages rounded
    to one decimal.  `profit_factor` is `math.inf` when there are
    profits but no losses.
    """
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    profit_factor: float
    avg_win: float
    avg_loss: float
    largest_win: float
    largest_loss: float
    total_profit: float
    total_loss: float
    net_pl: float
    avg_rr: float
    max_consecutive_wins: int
    max_consecutive_losses: int
    long_trades: int
    short_trades: int
    long_win_rate: float
    short_win_rate: float
    best_trade: float
    worst_trade: float
    monthly: List[MonthlyBucket] = field(default_factory=list)
    symbols: List[SymbolBucket] = field(default_factory=list)
    top_symbols: List[SymbolBucket] = field(default_factory=list)
    strategies: List[StrategyBucket] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)

    @property
    def profit_factor_is_infinite(self) -> bool:
        return math.isinf(self.profit_factor)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class _Tally:
    """Running sums for one bucket."""

    def __init__(self) -> None:
        self.trade_count = 0
        self.profit = 0.0
        self.loss = 0.0
        self.win_count = 0
        self.loss_count = 0
        self.rr_sum = 0.0
        self.rr_count = 0

    def add(self, trade: TradeRecord) -> None:
        self.trade_count += 1
        pnl = trade.profit_loss
        if pnl > 0:
            self.profit += pnl
            self.win_count += 1
        elif pnl < 0:
            self.loss += abs(pnl)
            self.loss_count += 1
        if trade.risk_reward_ratio is not None:
            self.rr_sum += trade.risk_reward_ratio
            self.rr_count += 1

    @property
    def net_pl(self) -> float:
        return self.profit - self.loss

    @property
    def win_rate(self) -> float:
        return win_rate(self.win_count, self.trade_count)

    @property
    def avg_rr(self) -> Optional[float]:
        return self.rr_sum / self.rr_count if self.rr_count else None


def win_rate(wins: int, total: int) -> float:
    """Percentage of winners rounded to one decimal, 0 for an empty set."""
    if total == 0:
        return 0.0
    return round(wins / total * 100, 1)


def profit_factor(total_profit: float, total_loss: float) -> float:
    """Gross profit over gross loss.

    Returns `math.inf` when there is profit but no loss and ``0.0`` when
    both are zero.
    """
    if total_loss > 0:
        return total_profit / total_loss
    if total_profit > 0:
        return INFINITE_PROFIT_FACTOR
    return 0.0


def max_streaks(trades: Iterable[TradeRecord]) -> Tuple[int, int]:
    """Longest runs of consecutive wins and losses in the given order.

    Trades with zero P&L are skipped: they neither extend nor break a
    run.  The order is the journal order, not the trade date.
    """
    max_wins = max_losses = 0
    win_streak = loss_streak = 0
    for trade in trades:
        if trade.profit_loss > 0:
            win_streak += 1
            loss_streak = 0
            max_wins = max(max_wins, win_streak)
        elif trade.profit_loss < 0:
            loss_streak += 1
            win_streak = 0
            max_losses = max(max_losses, loss_streak)
    return max_wins, max_losses


def equity_curve(trades: Iterable[TradeRecord]) -> List[EquityPoint]:
    """Cumulative P&L per trade, ordered by trade date."""
    points: List[EquityPoint] = []
    equity = 0.0
    for trade in sorted(trades, key=lambda t: t.date):
        equity += trade.profit_loss
        points.append(EquityPoint(date=trade.date, equity=equity))
    return points


def _group(trades: Sequence[TradeRecord], key: Callable[[TradeRecord], str]) -> Dict[str, _Tally]:
    groups: Dict[str, _Tally] = {}
    for trade in trades:
        groups.setdefault(key(trade), _Tally()).add(trade)
    return groups


def monthly_breakdown(trades: Sequence[TradeRecord]) -> List[MonthlyBucket]:
    """Monthly buckets keyed by ``YYYY-MM``, newest month first."""
    buckets = [
        MonthlyBucket(
            month=month,
            trade_count=tally.trade_count,
            profit=tally.profit,
            loss=tally.loss,
            net_pl=tally.net_pl,
        )
        for month, tally in _group(trades, lambda t: month_key(t.date)).items()
    ]
    buckets.sort(key=lambda b: b.month, reverse=True)
    return buckets


def symbol_breakdown(trades: Sequence[TradeRecord]) -> List[SymbolBucket]:
    """Per-symbol buckets, best net P&L first."""
    buckets = [
        SymbolBucket(
            symbol=symbol,
            trade_count=tally.trade_count,
            profit=tally.profit,
            loss=tally.loss,
            net_pl=tally.net_pl,
            win_count=tally.win_count,
            loss_count=tally.loss_count,
            win_rate=tally.win_rate,
        )
        for symbol, tally in _group(trades, lambda t: t.symbol).items()
    ]
    buckets.sort(key=lambda b: b.net_pl, reverse=True)
    return buckets


def strategy_breakdown(trades: Sequence[TradeRecord]) -> List[StrategyBucket]:
    """Per-strategy buckets, best net P&L first.

    Trades without a strategy are grouped under ``Untagged``.
    """
    buckets = [
        StrategyBucket(
            strategy=strategy,
            trade_count=tally.trade_count,
            profit=tally.profit,
            loss=tally.loss,
            net_pl=tally.net_pl,
            win_count=tally.win_count,
            loss_count=tally.loss_count,
            win_rate=tally.win_rate,
            avg_rr=tally.avg_rr,
        )
        for strategy, tally in _group(trades, lambda t: normalize_strategy(t.strategy)).items()
    ]
    buckets.sort(key=lambda b: b.net_pl, reverse=True)
    return buckets


class AnalyticsEngine:
    """Compute an `AnalyticsSnapshot` from the trade history.

    Parameters
    ----------
    top_symbols : int
        Number of symbol buckets kept in `AnalyticsSnapshot.top_symbols`.
    """

    def __init__(self, top_symbols: int = 10) -> None:
        self.top_symbols = top_symbols

    def compute(self, trades: Iterable[TradeRecord]) -> AnalyticsSnapshot:
        """Derive every metric and breakdown for the given trades.

        Raises
        ------
        ValueError
            If `trades` is empty.  Callers show an empty-journal state
            instead of calling the engine.
        """
        trades = list(trades)
        if not trades:
            raise ValueError("cannot compute analytics for an empty trade history")

        pnls = [t.profit_loss for t in trades]
        wins = [p for p in pnls if p > 0]
        losses = [p for p in pnls if p < 0]
        total_trades = len(trades)

        total_profit = sum(wins)
        total_loss = abs(sum(losses))
        avg_win = total_profit / len(wins) if wins else 0.0
        avg_loss = total_loss / len(losses) if losses else 0.0
        avg_rr = avg_win / avg_loss if wins and losses else 0.0

        longs = [t for t in trades if t.type == LONG]
        shorts = [t for t in trades if t.type == SHORT]
        consecutive_wins, consecutive_losses = max_streaks(trades)

        symbols = symbol_breakdown(trades)
        snapshot = AnalyticsSnapshot(
            total_trades=total_trades,
            wins=len(wins),
            losses=len(losses),
            win_rate=win_rate(len(wins), total_trades),
            profit_factor=profit_factor(total_profit, total_loss),
            avg_win=avg_win,
            avg_loss=avg_loss,
            largest_win=max(wins) if wins else 0.0,
            largest_loss=min(losses) if losses else 0.0,
            total_profit=total_profit,
            total_loss=total_loss,
            net_pl=total_profit - total_loss,
            avg_rr=avg_rr,
            max_consecutive_wins=consecutive_wins,
            max_consecutive_losses=consecutive_losses,
            long_trades=len(longs),
            short_trades=len(shorts),
            long_win_rate=win_rate(sum(1 for t in longs if t.profit_loss > 0), len(longs)),
            short_win_rate=win_rate(sum(1 for t in shorts if t.profit_loss > 0), len(shorts)),
            best_trade=max(pnls),
            worst_trade=min(pnls),
            monthly=monthly_breakdown(trades),
            symbols=symbols,
            top_symbols=symbols[:self.top_symbols],
            strategies=strategy_breakdown(trades),
            equity_curve=equity_curve(trades),
        )
        logger.debug(
            "Computed analytics over %d trades: net P&L %.2f, win rate %.1f%%",
            total_trades, snapshot.net_pl, snapshot.win_rate,
        )
        return snapshot
