"""Optimistic mutation layer keeping a local view in sync with a data gateway."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional, Union

from pocketbook.cache import LocalCache
from pocketbook.database.base import DataGateway
from pocketbook.domain import aggregation
from pocketbook.domain.entities import (
    AMOUNT_PLACES,
    EDITABLE_TRANSACTION_FIELDS,
    RATE_PLACES,
    TEMPORARY_ID_PREFIX,
    CategoryAmount,
    ExchangeRate,
    MonthSummary,
    MutationStatus,
    Transaction,
    TransactionDraft,
    TransactionKind,
    positive_amount,
    within_places,
)
from pocketbook.domain.errors import (
    ConflictError,
    DomainError,
    GatewayError,
    NotFoundError,
    ValidationError,
    invalid_rate,
    transaction_not_found,
    unknown_patch_fields,
)
from pocketbook.domain.notifications import Notifier
from pocketbook.domain.state import EXCHANGE_RATES, TRANSACTIONS, LedgerState
from pocketbook.utils.date_parser import month_start

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    """Record of one optimistic change.

    A mutation is PENDING from the moment its effect is visible locally. It
    ends CONFIRMED (the local entry now holds the store's record), FAILED (the
    local view was rolled back) or DISCARDED (the state was closed before the
    store answered, so nothing was applied).
    """

    action: str
    target: str
    snapshot: Any = None
    status: MutationStatus = MutationStatus.PENDING
    result: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.CONFIRMED


def temporary_id() -> str:
    return f"{TEMPORARY_ID_PREFIX}{uuid.uuid4().hex}"


def normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Validate and coerce the fields of an update patch.

    Raises:
        ValidationError: On unknown fields or invalid values
    """
    unknown = [name for name in patch if name not in EDITABLE_TRANSACTION_FIELDS]
    if unknown:
        raise ValidationError(unknown_patch_fields(unknown))

    changes: dict[str, Any] = {}
    for name, value in patch.items():
        if name == "amount":
            value = positive_amount(value, AMOUNT_PLACES)
        elif name == "kind":
            value = TransactionKind.parse(value)
        elif name == "date":
            if isinstance(value, datetime):
                value = value.date()
            elif isinstance(value, str):
                try:
                    value = date.fromisoformat(value)
                except ValueError:
                    raise ValidationError(f"Invalid date {value!r}")
            elif not isinstance(value, date):
                raise ValidationError(f"Invalid date {value!r}")
        elif name == "note":
            value = value or None
        changes[name] = value
    return changes


class Ledger:
    """Owner's transactions and exchange rates with optimistic mutations.

    Each mutation is applied to ``state`` immediately, then sent to the
    gateway. A confirmed change replaces the local entry with the store's
    record and writes the collection through to the cache; a failed change is
    rolled back from a snapshot taken before it was applied, and the owner is
    notified.

    Mutations of the same entity are not serialized against each other. When
    two edits overlap, whichever the store answers last wins locally.
    """

    def __init__(
        self,
        gateway: DataGateway,
        state: Optional[LedgerState] = None,
        cache: Optional[LocalCache] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.gateway = gateway
        self.state = state if state is not None else LedgerState(gateway.owner_id)
        self.cache = cache
        self.notifier = notifier if notifier is not None else Notifier()

    def close(self) -> None:
        """Detach from in-flight requests; their results will be discarded."""
        self.state.close()

    # Loading
    def load_cached(self) -> bool:
        """Pre-populate collections from the local cache.

        Collections that were already fetched from the store are left alone.

        Returns:
            True if any cached entries were loaded
        """
        if self.cache is None:
            return False

        loaded = False
        if not self.state.fetched[TRANSACTIONS]:
            cached = self.cache.load_transactions()
            if cached:
                pending = [txn for txn in self.state.transactions if txn.is_pending]
                self.state.transactions = cached + pending
                loaded = True
        if not self.state.fetched[EXCHANGE_RATES]:
            cached_rates = self.cache.load_exchange_rates()
            if cached_rates:
                self.state.exchange_rates = cached_rates
                loaded = True
        return loaded

    def _accepts(self, generation: int, collection: str, token: int) -> bool:
        if not self.state.is_current(generation):
            logger.debug("Discarding %s refresh for closed state", collection)
            return False
        if not self.state.is_latest_refresh(collection, token):
            logger.debug("Discarding stale %s refresh", collection)
            return False
        return True

    async def refresh_transactions(self) -> bool:
        """Replace the transaction list with the store's.

        Entries still waiting for a create to be confirmed are kept. A result
        requested before the latest confirmed mutation is discarded.

        Returns:
            True if the fetched list was applied
        """
        generation = self.state.generation
        token = self.state.begin_refresh(TRANSACTIONS)
        try:
            fetched = await self.gateway.list_transactions()
        except GatewayError as e:
            if self.state.is_current(generation):
                logger.warning("Could not refresh transactions: %s", e)
                self.notifier.error("Could not load transactions", str(e))
            return False

        if not self._accepts(generation, TRANSACTIONS, token):
            return False
        pending = [txn for txn in self.state.transactions if txn.is_pending]
        self.state.transactions = list(fetched) + pending
        self.state.fetched[TRANSACTIONS] = True
        self._cache_transactions()
        logger.debug("Loaded %d transactions", len(fetched))
        return True

    async def refresh_exchange_rates(self) -> bool:
        """Replace the exchange-rate list with the store's.

        Returns:
            True if the fetched list was applied
        """
        generation = self.state.generation
        token = self.state.begin_refresh(EXCHANGE_RATES)
        try:
            fetched = await self.gateway.list_exchange_rates()
        except GatewayError as e:
            if self.state.is_current(generation):
                logger.warning("Could not refresh exchange rates: %s", e)
                self.notifier.error("Could not load exchange rates", str(e))
            return False

        if not self._accepts(generation, EXCHANGE_RATES, token):
            return False
        self.state.exchange_rates = list(fetched)
        self.state.fetched[EXCHANGE_RATES] = True
        self._cache_rates()
        return True

    async def refresh(self) -> bool:
        """Refresh both collections. Returns True if both were applied."""
        results = await asyncio.gather(self.refresh_transactions(), self.refresh_exchange_rates())
        return all(results)

    # Derived reads
    def month_transactions(self, month: str) -> list[Transaction]:
        return aggregation.month_transactions(self.state.transactions, month)

    def month_summary(self, month: str) -> MonthSummary:
        return aggregation.month_summary(self.state.transactions, month)

    def last_n_months_summary(
        self, n: int = 6, reference_date: Union[date, str, None] = None
    ) -> list[MonthSummary]:
        return aggregation.last_n_months_summary(self.state.transactions, n, reference_date)

    def all_months_summary(self, newest_first: bool = False) -> list[MonthSummary]:
        return aggregation.all_months_summary(self.state.transactions, newest_first=newest_first)

    def category_breakdown(self, month: str, kind: Union[TransactionKind, str]) -> list[CategoryAmount]:
        return aggregation.category_breakdown(self.state.transactions, month, kind)

    def exchange_rate(self, month: str) -> Optional[ExchangeRate]:
        return aggregation.rate_for_month(self.state.exchange_rates, month)

    def converted_month_summary(self, month: str) -> Optional[MonthSummary]:
        """Month summary divided by that month's rate, or None without a rate."""
        rate = self.exchange_rate(month)
        if rate is None:
            return None
        return aggregation.convert_summary(self.month_summary(month), rate)

    # Mutations
    async def _send(
        self,
        mutation: Mutation,
        generation: int,
        request: Awaitable[Any],
        rollback: Callable[[], None],
        failure_title: str,
    ) -> bool:
        """Await a gateway request for a pending mutation.

        Returns True when the caller should apply ``mutation.result``. On
        failure the rollback runs and the owner is notified; errors that are
        not domain errors are re-raised after the rollback.
        """
        try:
            mutation.result = await request
        except Exception as e:
            if not self._still_live(mutation, generation):
                return False
            rollback()
            mutation.status = MutationStatus.FAILED
            mutation.error = e
            mutation.result = None
            logger.warning("%s of %s failed, rolled back: %s", mutation.action, mutation.target, e)
            self.notifier.error(failure_title, str(e))
            if not isinstance(e, DomainError):
                raise
            return False
        return self._still_live(mutation, generation)

    def _still_live(self, mutation: Mutation, generation: int) -> bool:
        if self.state.is_current(generation):
            return True
        mutation.status = MutationStatus.DISCARDED
        logger.info("Discarding result of %s for %s: state closed", mutation.action, mutation.target)
        return False

    def _require_stored(self, transaction_id: str) -> Transaction:
        txn = self.state.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.is_pending:
            raise ValidationError(f"Transaction {transaction_id} is still being saved")
        return txn

    def _cache_transactions(self) -> None:
        if self.cache is not None:
            self.cache.save_transactions(self.state.persisted_transactions())

    def _cache_rates(self) -> None:
        if self.cache is not None:
            self.cache.save_exchange_rates(self.state.persisted_rates())

    async def add_transaction(self, draft: TransactionDraft) -> Mutation:
        """Show a new transaction immediately, then store it.

        Returns:
            The mutation; on success ``result`` is the stored transaction
        """
        generation = self.state.generation
        now = datetime.now(UTC)
        pending = Transaction(
            id=temporary_id(),
            owner_id=self.state.owner_id,
            amount=draft.amount,
            kind=draft.kind,
            category_id=draft.category_id,
            date=draft.date,
            note=draft.note,
            created_at=now,
            updated_at=now,
        )
        self.state.transactions.append(pending)
        mutation = Mutation(action="add", target=pending.id)

        def rollback() -> None:
            self.state.remove_transaction(pending.id)

        request = self.gateway.create_transaction(draft)
        if not await self._send(mutation, generation, request, rollback, "Could not add transaction"):
            return mutation

        saved = mutation.result
        if self.state.transaction_index(saved.id) is not None:
            # A refresh already brought the stored record in
            self.state.remove_transaction(pending.id)
        else:
            self.state.put_transaction(saved, replace_id=pending.id)
        mutation.status = MutationStatus.CONFIRMED
        self.state.record_change(TRANSACTIONS)
        self._cache_transactions()
        logger.info("Added transaction %s", saved.id)
        self.notifier.success("Transaction added", f"{saved.kind.value} of {saved.amount:,.2f} on {saved.date}")
        return mutation

    async def update_transaction(self, transaction_id: str, patch: dict[str, Any]) -> Mutation:
        """Apply patch fields immediately, then store them.

        Raises:
            NotFoundError: If the transaction is not in the local view
            ValidationError: If the patch is invalid or the transaction is unsaved
        """
        previous = self._require_stored(transaction_id)
        changes = normalize_patch(patch)
        generation = self.state.generation
        self.state.put_transaction(replace(previous, **changes, updated_at=datetime.now(UTC)))
        mutation = Mutation(action="update", target=transaction_id, snapshot=previous)

        def rollback() -> None:
            if self.state.transaction_index(transaction_id) is not None:
                self.state.put_transaction(previous)

        request = self.gateway.update_transaction(transaction_id, changes)
        if not await self._send(mutation, generation, request, rollback, "Could not update transaction"):
            return mutation

        self.state.put_transaction(mutation.result)
        mutation.status = MutationStatus.CONFIRMED
        self.state.record_change(TRANSACTIONS)
        self._cache_transactions()
        logger.info("Updated transaction %s", transaction_id)
        self.notifier.success("Transaction updated", f"Transaction {transaction_id} saved")
        return mutation

    async def delete_transaction(self, transaction_id: str) -> Mutation:
        """Remove a transaction immediately, then delete it from the store.

        Raises:
            NotFoundError: If the transaction is not in the local view
            ValidationError: If the transaction is unsaved
        """
        previous = self._require_stored(transaction_id)
        generation = self.state.generation
        index = self.state.remove_transaction(transaction_id)
        mutation = Mutation(action="delete", target=transaction_id, snapshot=previous)

        def rollback() -> None:
            if self.state.transaction_index(transaction_id) is None:
                position = min(index, len(self.state.transactions))
                self.state.transactions.insert(position, previous)

        request = self.gateway.delete_transaction(transaction_id)
        if not await self._send(mutation, generation, request, rollback, "Could not delete transaction"):
            return mutation

        mutation.status = MutationStatus.CONFIRMED
        self.state.record_change(TRANSACTIONS)
        self._cache_transactions()
        logger.info("Deleted transaction %s", transaction_id)
        self.notifier.success("Transaction deleted", f"Transaction {transaction_id} removed")
        return mutation

    async def update_exchange_rate(self, month: str, value: Union[Decimal, str, float]) -> Mutation:
        """Set the exchange rate of a month, inserting or updating its record.

        If the store reports that the month's record was created concurrently,
        the rates are re-read and the upsert is retried once.

        Raises:
            ValidationError: If the month or value is invalid
        """
        month_start(month)
        try:
            value = positive_amount(value)
        except ValidationError:
            raise ValidationError(invalid_rate(value))
        within_places(value, RATE_PLACES)

        generation = self.state.generation
        index = self.state.rate_index(month)
        previous = self.state.exchange_rates[index] if index is not None else None
        self.state.put_rate(
            ExchangeRate(
                id=previous.id if previous else temporary_id(),
                owner_id=self.state.owner_id,
                month=month,
                value=value,
                updated_at=datetime.now(UTC),
            )
        )
        mutation = Mutation(action="upsert_rate", target=month, snapshot=previous)
        reread: Optional[list[ExchangeRate]] = None

        async def upsert() -> ExchangeRate:
            nonlocal reread
            try:
                return await self.gateway.upsert_exchange_rate(month, value)
            except ConflictError:
                logger.info("Rate for %s was created concurrently, re-reading", month)
                reread = await self.gateway.list_exchange_rates()
                return await self.gateway.upsert_exchange_rate(month, value)

        def rollback() -> None:
            if reread is not None:
                self.state.exchange_rates = list(reread)
            elif previous is not None:
                self.state.put_rate(previous)
            else:
                position = self.state.rate_index(month)
                if position is not None:
                    del self.state.exchange_rates[position]

        if not await self._send(mutation, generation, upsert(), rollback, "Could not update exchange rate"):
            return mutation

        if reread is not None:
            self.state.exchange_rates = list(reread)
        self.state.put_rate(mutation.result)
        mutation.status = MutationStatus.CONFIRMED
        self.state.record_change(EXCHANGE_RATES)
        self._cache_rates()
        logger.info("Exchange rate for %s set to %s", month, value)
        self.notifier.success("Exchange rate updated", f"{month}: {value}")
        return mutation
