"""Shared pytest fixtures for pocketbook tests."""

import asyncio
import os
import tempfile
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

import pytest

from pocketbook.cache import LocalCache
from pocketbook.database.base import DataGateway
from pocketbook.database.factories import create_sqlite_gateway
from pocketbook.domain.entities import (
    Category,
    ExchangeRate,
    Transaction,
    TransactionKind,
)
from pocketbook.domain.errors import ConflictError, GatewayError, NotFoundError
from pocketbook.domain.ledger import Ledger
from pocketbook.domain.notifications import Notifier


class FakeGateway(DataGateway):
    """In-memory gateway whose calls can be made to fail or to wait.

    ``fail(op)`` makes the next call of ``op`` raise. ``hold(op)`` returns an
    event; the next call of ``op`` waits for it before answering, with list
    results captured before the wait like a response already in flight.
    """

    def __init__(self, owner_id: str = "alice"):
        self.owner_id = owner_id
        self.transactions: dict[str, Transaction] = {}
        self.rates: dict[str, ExchangeRate] = {}
        self.categories: dict[str, Category] = {}
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, list[asyncio.Event]] = {}
        self.conflicts = 0
        self.calls: list[str] = []
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def fail(self, operation: str, error: Optional[Exception] = None) -> None:
        self.failures[operation] = error or GatewayError("store unavailable")

    def hold(self, operation: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates.setdefault(operation, []).append(event)
        return event

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        gates = self.gates.get(operation)
        if gates:
            await gates.pop(0).wait()
        error = self.failures.pop(operation, None)
        if error is not None:
            raise error

    def seed_transaction(self, amount, kind, txn_date, category_id=None, note=None) -> Transaction:
        now = datetime.now(UTC)
        txn = Transaction(
            id=self._next_id("txn"),
            owner_id=self.owner_id,
            amount=Decimal(str(amount)),
            kind=TransactionKind(kind),
            category_id=category_id,
            date=txn_date,
            note=note,
            created_at=now,
            updated_at=now,
        )
        self.transactions[txn.id] = txn
        return txn

    def seed_rate(self, month: str, value) -> ExchangeRate:
        rate = ExchangeRate(
            id=self._next_id("rate"),
            owner_id=self.owner_id,
            month=month,
            value=Decimal(str(value)),
            updated_at=datetime.now(UTC),
        )
        self.rates[month] = rate
        return rate

    def close(self) -> None:
        pass

    async def list_transactions(self, start_date=None, end_date=None):
        result = [
            txn
            for txn in self.transactions.values()
            if (start_date is None or txn.date >= start_date) and (end_date is None or txn.date <= end_date)
        ]
        await self._enter("list_transactions")
        return result

    async def get_transaction(self, transaction_id):
        await self._enter("get_transaction")
        return self.transactions.get(transaction_id)

    async def create_transaction(self, draft):
        await self._enter("create_transaction")
        return self.seed_transaction(draft.amount, draft.kind, draft.date, draft.category_id, draft.note)

    async def update_transaction(self, transaction_id, changes):
        await self._enter("update_transaction")
        if transaction_id not in self.transactions:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        updated = replace(self.transactions[transaction_id], **changes, updated_at=datetime.now(UTC))
        self.transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id):
        await self._enter("delete_transaction")
        if self.transactions.pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

    async def list_exchange_rates(self):
        result = sorted(self.rates.values(), key=lambda rate: rate.month)
        await self._enter("list_exchange_rates")
        return result

    async def upsert_exchange_rate(self, month, value):
        await self._enter("upsert_exchange_rate")
        if self.conflicts:
            self.conflicts -= 1
            if month not in self.rates:
                self.seed_rate(month, Decimal("1"))
            raise ConflictError(f"Exchange rate for {month} already exists")
        existing = self.rates.get(month)
        if existing is None:
            return self.seed_rate(month, value)
        updated = replace(existing, value=Decimal(str(value)), updated_at=datetime.now(UTC))
        self.rates[month] = updated
        return updated

    async def list_categories(self):
        await self._enter("list_categories")
        return list(self.categories.values())

    async def create_category(self, name, kind):
        await self._enter("create_category")
        if any(cat.name == name for cat in self.categories.values()):
            raise ConflictError(f"Category '{name}' already exists")
        category = Category(
            id=self._next_id("cat"),
            name=name,
            kind=TransactionKind.parse(kind),
            owner_id=self.owner_id,
            created_at=datetime.now(UTC),
        )
        self.categories[category.id] = category
        return category


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def temp_gateway(temp_db_path):
    """Create a SQLite gateway on a temporary database for testing."""
    gateway = create_sqlite_gateway(database_path=temp_db_path, owner_id="alice")

    yield gateway

    gateway.close()


@pytest.fixture
def fake_gateway():
    """Create an in-memory gateway with controllable failures."""
    return FakeGateway()


@pytest.fixture
def cache(tmp_path):
    """Create a local cache in a temporary directory."""
    return LocalCache(tmp_path / "cache", "alice")


@pytest.fixture
def notifications():
    """Collect notifications delivered through a notifier."""
    notifier = Notifier()
    received = []
    notifier.subscribe(received.append)
    return notifier, received


@pytest.fixture
def ledger(fake_gateway, cache, notifications):
    """Create a ledger over the fake gateway."""
    notifier, _ = notifications
    return Ledger(fake_gateway, cache=cache, notifier=notifier)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_args(temp_db_path, tmp_path):
    """Global CLI options pointing at temporary storage."""
    return ["--db-path", temp_db_path, "--cache-dir", str(tmp_path / "cli-cache"), "--owner", "alice"]
