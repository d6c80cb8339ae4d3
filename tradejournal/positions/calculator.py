"""
Open-position P&L and risk/reward calculations.

These helpers price an open position against a live or manually
entered quote, and turn a position into a closed trade once an exit
price is known.  They never touch storage: persisting the returned
records is the repository's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional

from ..journal.models import TradeRecord, LONG, normalize_strategy
from ..utils.timeutils import days_between, today_iso


@dataclass
class PortfolioSummary:
    """Totals over all open positions at the current prices."""
    positions: int
    unrealized_pl: float
    position_value: float


def _direction(trade_type: str) -> int:
    return 1 if trade_type == LONG else -1


def reference_price(position: TradeRecord, current_price: Any = None) -> float:
    """Resolve the price a position is marked at.

    Falls back to the entry price when `current_price` is missing,
    unparsable, NaN or zero.
    """
    try:
        price = float(current_price)
    except (TypeError, ValueError):
        return position.entry_price
    if math.isnan(price) or price == 0:
        return position.entry_price
    return price


def directional_pl(trade_type: str, entry_price: float, price: float, quantity: float) -> float:
    """P&L of moving from `entry_price` to `price`, signed by direction."""
    return (price - entry_price) * quantity * _direction(trade_type)


def unrealized_pl(position: TradeRecord, current_price: Any = None) -> float:
    """Hypothetical P&L of an open position at `current_price`."""
    price = reference_price(position, current_price)
    return directional_pl(position.type, position.entry_price, price, position.quantity)


def pl_percent(position: TradeRecord, current_price: Any = None) -> float:
    """Percentage move from entry, positive when the position is in profit."""
    price = reference_price(position, current_price)
    if not position.entry_price:
        return 0.0
    return (price - position.entry_price) / position.entry_price * 100 * _direction(position.type)


def risk_reward_ratio(
    entry_price: float,
    stop_loss: Optional[float],
    quantity: float,
    profit_loss: float,
) -> Optional[float]:
    """Realized reward over the risk taken to the stop-loss.

    Returns `None` when there is no stop-loss or the risk is zero.
    """
    if not stop_loss:
        return None
    risk = abs(entry_price - stop_loss) * quantity
    if risk <= 0:
        return None
    return abs(profit_loss) / risk


def close_position(position: TradeRecord, exit_price: Any, exit_date: str) -> TradeRecord:
    """Return the closed version of `position`.

    The P&L is realized at `exit_price` and the record's date becomes
    `exit_date`.  The risk/reward ratio is recomputed when a stop-loss
    is set; otherwise the existing value is carried over.

    Raises
    ------
    ValueError
        If `exit_price` cannot be parsed as a number.
    """
    exit_price = float(exit_price)
    profit_loss = directional_pl(position.type, position.entry_price, exit_price, position.quantity)
    rr = risk_reward_ratio(position.entry_price, position.stop_loss, position.quantity, profit_loss)
    if rr is None:
        rr = position.risk_reward_ratio
    return replace(
        position,
        exit_price=exit_price,
        profit_loss=profit_loss,
        risk_reward_ratio=rr,
        date=exit_date,
    )


def open_position(
    symbol: str,
    trade_type: str,
    quantity: float,
    entry_price: float,
    date: Optional[str] = None,
    stop_loss: Optional[float] = None,
    strategy: Optional[str] = None,
    risk_amount: Optional[float] = None,
    notes: str = "",
) -> TradeRecord:
    """Build a new open position record."""
    return TradeRecord(
        id=None,
        date=date or today_iso(),
        symbol=symbol,
        type=trade_type.lower(),
        quantity=float(quantity),
        entry_price=float(entry_price),
        exit_price=0.0,
        stop_loss=stop_loss,
        risk_amount=risk_amount,
        strategy=normalize_strategy(strategy),
        profit_loss=0.0,
        risk_reward_ratio=None,
        notes=notes,
    )


def record_trade(
    symbol: str,
    trade_type: str,
    quantity: float,
    entry_price: float,
    exit_price: float = 0.0,
    date: Optional[str] = None,
    stop_loss: Optional[float] = None,
    strategy: Optional[str] = None,
    risk_amount: Optional[float] = None,
    notes: str = "",
) -> TradeRecord:
    """Build a manually entered trade.

    P&L is only realized when an exit price is given; the risk/reward
    ratio additionally needs a stop-loss.
    """
    trade = open_position(
        symbol, trade_type, quantity, entry_price,
        date=date, stop_loss=stop_loss, strategy=strategy,
        risk_amount=risk_amount, notes=notes,
    )
    exit_price = float(exit_price or 0.0)
    if exit_price <= 0:
        return trade
    profit_loss = directional_pl(trade.type, trade.entry_price, exit_price, trade.quantity)
    return replace(
        trade,
        exit_price=exit_price,
        profit_loss=profit_loss,
        risk_reward_ratio=risk_reward_ratio(trade.entry_price, stop_loss, trade.quantity, profit_loss),
    )


def days_held(position: TradeRecord, today: Optional[str] = None) -> int:
    return days_between(position.date, today)


def portfolio_summary(
    positions: Iterable[TradeRecord],
    prices: Optional[Mapping[Any, Any]] = None,
) -> PortfolioSummary:
    """Sum unrealized P&L and market value over open positions.

    `prices` maps a position id to its current price; positions without
    a usable price are marked at their entry price.
    """
    prices = prices or {}
    count = 0
    total_pl = 0.0
    total_value = 0.0
    for position in positions:
        price = reference_price(position, prices.get(position.id))
        count += 1
        total_pl += directional_pl(position.type, position.entry_price, price, position.quantity)
        total_value += price * position.quantity
    return PortfolioSummary(positions=count, unrealized_pl=total_pl, position_value=total_value)
