"""In-memory state container for one owner's collections."""

from typing import Optional

from pocketbook.domain.entities import TEMPORARY_ID_PREFIX, ExchangeRate, Transaction

TRANSACTIONS = "transactions"
EXCHANGE_RATES = "exchange_rates"


class LedgerState:
    """Owned, mutable view of the transaction and exchange-rate lists.

    The container is shared by reference between the mutation layer and the
    readers that aggregate it. All writes happen from a single event loop.

    Two counters guard against applying stale results:

    - ``generation`` is bumped by ``close()``; work started under an older
      generation must discard its result.
    - a per-collection refresh token is bumped by every ``begin_refresh()``
      and every ``record_change()``; only a refresh issued after the latest
      of both may replace a collection.
    """

    def __init__(
        self,
        owner_id: str,
        transactions: Optional[list[Transaction]] = None,
        exchange_rates: Optional[list[ExchangeRate]] = None,
    ):
        self.owner_id = owner_id
        self.transactions: list[Transaction] = list(transactions or [])
        self.exchange_rates: list[ExchangeRate] = list(exchange_rates or [])
        self.generation = 0
        self.closed = False
        self.fetched = {TRANSACTIONS: False, EXCHANGE_RATES: False}
        self._refresh_tokens = {TRANSACTIONS: 0, EXCHANGE_RATES: 0}

    def close(self) -> None:
        """Stop accepting results from in-flight requests."""
        self.closed = True
        self.generation += 1

    def is_current(self, generation: int) -> bool:
        return not self.closed and generation == self.generation

    def begin_refresh(self, collection: str) -> int:
        self._refresh_tokens[collection] += 1
        return self._refresh_tokens[collection]

    def record_change(self, collection: str) -> None:
        """Mark a confirmed change; refreshes already in flight are now stale."""
        self._refresh_tokens[collection] += 1

    def is_latest_refresh(self, collection: str, token: int) -> bool:
        return self._refresh_tokens[collection] == token

    def transaction_index(self, transaction_id: str) -> Optional[int]:
        for index, txn in enumerate(self.transactions):
            if txn.id == transaction_id:
                return index
        return None

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        index = self.transaction_index(transaction_id)
        return None if index is None else self.transactions[index]

    def rate_index(self, month: str) -> Optional[int]:
        for index, rate in enumerate(self.exchange_rates):
            if rate.month == month:
                return index
        return None

    def put_transaction(self, transaction: Transaction, replace_id: Optional[str] = None) -> None:
        """Replace the entry with ``replace_id`` (default: the same id) or append."""
        index = self.transaction_index(replace_id or transaction.id)
        if index is None:
            self.transactions.append(transaction)
        else:
            self.transactions[index] = transaction

    def remove_transaction(self, transaction_id: str) -> Optional[int]:
        """Remove an entry and return the index it had."""
        index = self.transaction_index(transaction_id)
        if index is not None:
            del self.transactions[index]
        return index

    def put_rate(self, rate: ExchangeRate) -> None:
        """Replace the record for the same month in place, or append."""
        index = self.rate_index(rate.month)
        if index is None:
            self.exchange_rates.append(rate)
        else:
            self.exchange_rates[index] = rate

    def persisted_transactions(self) -> list[Transaction]:
        """Transactions the store has confirmed."""
        return [txn for txn in self.transactions if not txn.is_pending]

    def persisted_rates(self) -> list[ExchangeRate]:
        """Exchange rates the store has confirmed."""
        return [rate for rate in self.exchange_rates if not rate.id.startswith(TEMPORARY_ID_PREFIX)]
