"""
Trade record model.

A trade record is a single line in the journal: either a closed trade
with a realized profit or loss, or an open position whose exit price
is still zero.  Analytics, the position calculator and the repository
all share this one shape.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

LONG = "long"
SHORT = "short"
UNTAGGED = "Untagged"

# camelCase keys written by the original document store
_ALIASES = {
    'entryPrice': 'entry_price',
    'exitPrice': 'exit_price',
    'stopLoss': 'stop_loss',
    'riskAmount': 'risk_amount',
    'profitLoss': 'profit_loss',
    'riskRewardRatio': 'risk_reward_ratio',
}


def normalize_strategy(label: Optional[str]) -> str:
    """Return the strategy label, or ``Untagged`` when it is empty."""
    if label is None:
        return UNTAGGED
    label = str(label).strip()
    return label or UNTAGGED


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass
class TradeRecord:
    """Represents one journal entry.

    Attributes
    ----------
    id : str or None
        Opaque identifier assigned by the repository.
    date : str
        ISO ``YYYY-MM-DD`` date.  Overwritten with the exit date when a
        position is closed.
    symbol : str
        Instrument identifier, case-sensitive as stored.
    type : str
        ``'long'`` or ``'short'``.
    exit_price : float
        ``0`` while the position is open.
    profit_loss : float
        Realized P&L; ``0`` while the position is open.
    risk_reward_ratio : float or None
        Realized reward divided by the risk to the stop-loss, set at
        close time when a stop-loss exists.
    """
    id: Optional[str]
    date: str
    symbol: str
    type: str
    quantity: float
    entry_price: float
    exit_price: float = 0.0
    stop_loss: Optional[float] = None
    risk_amount: Optional[float] = None
    strategy: str = UNTAGGED
    profit_loss: float = 0.0
    risk_reward_ratio: Optional[float] = None
    notes: str = ""

    @property
    def is_closed(self) -> bool:
        return self.exit_price > 0

    @property
    def is_open(self) -> bool:
        return not self.is_closed

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TradeRecord":
        """Build a record from a stored document.

        Both snake_case and camelCase keys are accepted.  Missing
        ``symbol``, ``date`` or ``type`` values are kept as empty strings,
        so an untyped trade counts as neither long nor short.
        """
        values = {_ALIASES.get(key, key): value for key, value in data.items()}
        return cls(
            id=values.get('id'),
            date=str(values.get('date') or ""),
            symbol=str(values.get('symbol') or ""),
            type=str(values.get('type') or "").lower(),
            quantity=float(values.get('quantity') or 0.0),
            entry_price=float(values.get('entry_price') or 0.0),
            exit_price=float(values.get('exit_price') or 0.0),
            stop_loss=_optional_float(values.get('stop_loss')),
            risk_amount=_optional_float(values.get('risk_amount')),
            strategy=normalize_strategy(values.get('strategy')),
            profit_loss=float(values.get('profit_loss') or 0.0),
            risk_reward_ratio=_optional_float(values.get('risk_reward_ratio')),
            notes=str(values.get('notes') or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
