"""Durable local snapshot of an owner's collections.

The cache lets a client render the last known transactions and rates before
the store answers. It is never a source of truth: unreadable snapshots load as
empty and failed writes are logged and dropped.
"""

import json
import logging
import os
import re
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from pocketbook.domain.entities import ExchangeRate, Transaction, TransactionKind
from pocketbook.domain.state import EXCHANGE_RATES, TRANSACTIONS

logger = logging.getLogger(__name__)


def _transaction_to_dict(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "owner_id": txn.owner_id,
        "amount": str(txn.amount),
        "kind": TransactionKind(txn.kind).value,
        "category_id": txn.category_id,
        "date": txn.date.isoformat() if isinstance(txn.date, date) else txn.date,
        "note": txn.note,
        "created_at": txn.created_at.isoformat(),
        "updated_at": txn.updated_at.isoformat() if txn.updated_at else None,
    }


def _transaction_from_dict(data: dict[str, Any]) -> Transaction:
    raw_date = data["date"]
    # "YYYY-MM" keys are kept as strings; the aggregation layer matches on prefix
    txn_date = date.fromisoformat(raw_date) if len(raw_date) == 10 else raw_date
    return Transaction(
        id=data["id"],
        owner_id=data["owner_id"],
        amount=Decimal(data["amount"]),
        kind=TransactionKind(data["kind"]),
        category_id=data.get("category_id"),
        date=txn_date,
        note=data.get("note"),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
    )


def _rate_to_dict(rate: ExchangeRate) -> dict[str, Any]:
    return {
        "id": rate.id,
        "owner_id": rate.owner_id,
        "month": rate.month,
        "value": str(rate.value),
        "updated_at": rate.updated_at.isoformat(),
    }


def _rate_from_dict(data: dict[str, Any]) -> ExchangeRate:
    return ExchangeRate(
        id=data["id"],
        owner_id=data["owner_id"],
        month=data["month"],
        value=Decimal(data["value"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
    )


SERIALIZERS = {
    TRANSACTIONS: (_transaction_to_dict, _transaction_from_dict),
    EXCHANGE_RATES: (_rate_to_dict, _rate_from_dict),
}


class LocalCache:
    """JSON file cache with one slot per collection, namespaced by owner."""

    def __init__(self, cache_dir: Path, owner_id: str):
        self.cache_dir = Path(cache_dir)
        self.owner_id = owner_id

    @property
    def namespace(self) -> str:
        return re.sub(r"[^A-Za-z0-9_.-]", "_", self.owner_id)

    def path_for(self, slot: str) -> Path:
        return self.cache_dir / self.namespace / f"{slot}.json"

    def load(self, slot: str) -> list:
        """Return the last saved snapshot of a slot, or [] if unusable."""
        path = self.path_for(slot)
        if not path.exists():
            return []
        _, from_dict = SERIALIZERS[slot]
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            return [from_dict(item) for item in payload]
        except (OSError, ValueError, KeyError, TypeError, ArithmeticError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", path, e)
            return []

    def save(self, slot: str, collection: list) -> bool:
        """Overwrite a slot with the given collection. Returns False on failure."""
        path = self.path_for(slot)
        to_dict, _ = SERIALIZERS[slot]
        try:
            text = json.dumps([to_dict(item) for item in collection])
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not write cache %s: %s", path, e)
            return False
        logger.debug("Cached %d %s for owner %s", len(collection), slot, self.owner_id)
        return True

    def load_transactions(self) -> list[Transaction]:
        return self.load(TRANSACTIONS)

    def save_transactions(self, transactions: list[Transaction]) -> bool:
        return self.save(TRANSACTIONS, transactions)

    def load_exchange_rates(self) -> list[ExchangeRate]:
        return self.load(EXCHANGE_RATES)

    def save_exchange_rates(self, rates: list[ExchangeRate]) -> bool:
        return self.save(EXCHANGE_RATES, rates)


def create_local_cache(cache_dir: Optional[str] = None, owner_id: str = "local") -> LocalCache:
    """Create a cache rooted at cache_dir, POCKETBOOK_CACHE_DIR or ~/.pocketbook/cache."""
    if cache_dir is None:
        cache_dir = os.environ.get("POCKETBOOK_CACHE_DIR")
    if cache_dir is None:
        cache_dir = str(Path.home() / ".pocketbook" / "cache")
    return LocalCache(Path(cache_dir), owner_id)
