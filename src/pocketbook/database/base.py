"""Abstract data gateway interface."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from pocketbook.domain.entities import (
    Category,
    ExchangeRate,
    Transaction,
    TransactionDraft,
    TransactionKind,
)


class DataGateway(ABC):
    """Asynchronous CRUD interface to a remote store, scoped to one owner.

    Every operation may raise ``GatewayError`` for transport or authorization
    failures; callers must treat every call as fallible.

    Implementations backed by a remote store must not block the event loop
    while waiting for it. The SQLite gateway runs its queries inline because
    the file is local.
    """

    owner_id: str

    @abstractmethod
    def close(self) -> None:
        """Release connections held by the gateway."""
        pass

    # Transaction operations
    @abstractmethod
    async def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List the owner's transactions, optionally within a date range."""
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        """Store a new transaction. Returns the persisted record."""
        pass

    @abstractmethod
    async def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        """Apply field changes to a transaction. Returns the persisted record.

        Raises:
            NotFoundError: If the transaction does not exist for the owner
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction does not exist for the owner
        """
        pass

    # Exchange rate operations
    @abstractmethod
    async def list_exchange_rates(self) -> list[ExchangeRate]:
        """List the owner's exchange rates."""
        pass

    @abstractmethod
    async def upsert_exchange_rate(self, month: str, value: Decimal) -> ExchangeRate:
        """Insert or update the rate for (owner, month). Returns the persisted record.

        Raises:
            ConflictError: If a concurrent insert for the same month won the race
        """
        pass

    # Category operations
    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """List the owner's categories."""
        pass

    @abstractmethod
    async def create_category(self, name: str, kind: TransactionKind) -> Category:
        """Create a category. Returns the persisted record.

        Raises:
            ConflictError: If the owner already has a category with this name
        """
        pass
