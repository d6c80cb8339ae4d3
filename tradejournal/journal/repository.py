"""
JSON-backed trade repository.

Trades are stored in insertion order; that order is significant
because win/loss streaks are computed over it.  The repository does
no reconciliation between concurrent writers: the last write wins.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, List

from .models import TradeRecord, normalize_strategy
from ..utils.persistence import load_document, save_document


logger = logging.getLogger(__name__)


class TradeNotFoundError(KeyError):
    """Raised when a trade id does not exist in the journal."""


class JsonTradeRepository:
    """Store trade records in a JSON file.

    Parameters
    ----------
    path : str
        Location of the journal document.  It is created on the first
        write if it does not exist.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _read(self) -> List[Dict[str, Any]]:
        document = load_document(self.path)
        if document is None:
            return []
        return list(document.get('trades', []))

    def _write(self, rows: List[Dict[str, Any]]) -> None:
        save_document(self.path, {'trades': rows})

    def list_trades(self) -> List[TradeRecord]:
        """Return every trade in insertion order."""
        trades = [TradeRecord.from_dict(row) for row in self._read()]
        logger.debug("Loaded %d trades from %s", len(trades), self.path)
        return trades

    def get(self, trade_id: str) -> TradeRecord:
        for row in self._read():
            if row.get('id') == trade_id:
                return TradeRecord.from_dict(row)
        raise TradeNotFoundError(trade_id)

    def create(self, record: TradeRecord) -> TradeRecord:
        """Append a trade, assigning an id when it has none."""
        if record.id is None:
            record = replace(record, id=uuid.uuid4().hex)
        record = replace(record, strategy=normalize_strategy(record.strategy))
        rows = self._read()
        rows.append(record.to_dict())
        self._write(rows)
        logger.info("Created trade %s (%s %s)", record.id, record.type, record.symbol)
        return record

    def update(self, trade_id: str, changes: Dict[str, Any]) -> TradeRecord:
        """Apply a partial update to an existing trade and return it."""
        rows = self._read()
        for idx, row in enumerate(rows):
            if row.get('id') == trade_id:
                merged = dict(row)
                merged.update(changes)
                merged['id'] = trade_id
                record = TradeRecord.from_dict(merged)
                rows[idx] = record.to_dict()
                self._write(rows)
                logger.info("Updated trade %s", trade_id)
                return record
        raise TradeNotFoundError(trade_id)

    def save(self, record: TradeRecord) -> TradeRecord:
        """Overwrite a stored trade with the given record."""
        if record.id is None:
            raise TradeNotFoundError(None)
        return self.update(record.id, record.to_dict())

    def delete(self, trade_id: str) -> None:
        rows = self._read()
        remaining = [row for row in rows if row.get('id') != trade_id]
        if len(remaining) == len(rows):
            raise TradeNotFoundError(trade_id)
        self._write(remaining)
        logger.info("Deleted trade %s", trade_id)
