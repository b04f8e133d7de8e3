"""Tests for the local JSON cache."""

from datetime import date, datetime, UTC
from decimal import Decimal

from pocketbook.cache import LocalCache, create_local_cache
from pocketbook.domain.entities import ExchangeRate, Transaction, TransactionKind


def _transaction(txn_id="txn-1", txn_date=date(2024, 1, 15)):
    return Transaction(
        id=txn_id,
        owner_id="alice",
        amount=Decimal("12.34"),
        kind=TransactionKind.EXPENSE,
        category_id="cat-1",
        date=txn_date,
        note="coffee",
        created_at=datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
        updated_at=None,
    )


class TestLocalCache:
    """Tests for LocalCache."""

    def test_empty_cache_loads_nothing(self, cache):
        """Test that a missing slot loads as an empty list."""
        assert cache.load_transactions() == []
        assert cache.load_exchange_rates() == []

    def test_transactions_survive_reload(self, cache, tmp_path):
        """Test that saved transactions are read back by a new cache instance."""
        txns = [_transaction(), _transaction("txn-2", "2024-02")]
        assert cache.save_transactions(txns) is True

        reloaded = LocalCache(tmp_path / "cache", "alice").load_transactions()
        assert reloaded == txns

    def test_exchange_rates_survive_reload(self, cache):
        """Test that exchange rates keep their exact decimal value."""
        rate = ExchangeRate(
            id="rate-1",
            owner_id="alice",
            month="2024-01",
            value=Decimal("812.3456"),
            updated_at=datetime(2024, 1, 31, tzinfo=UTC),
        )
        cache.save_exchange_rates([rate])
        assert cache.load_exchange_rates() == [rate]

    def test_save_overwrites_slot(self, cache):
        """Test that each save replaces the previous snapshot."""
        cache.save_transactions([_transaction("a"), _transaction("b")])
        cache.save_transactions([_transaction("c")])
        assert [txn.id for txn in cache.load_transactions()] == ["c"]

    def test_corrupt_file_loads_as_empty(self, cache):
        """Test that an unreadable snapshot is ignored."""
        path = cache.path_for("transactions")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        assert cache.load_transactions() == []

    def test_wrong_shape_loads_as_empty(self, cache):
        """Test that a snapshot missing required keys is ignored."""
        path = cache.path_for("exchange_rates")
        path.parent.mkdir(parents=True)
        path.write_text('[{"month": "2024-01"}]', encoding="utf-8")
        assert cache.load_exchange_rates() == []

    def test_owners_do_not_share_snapshots(self, tmp_path):
        """Test that caches are namespaced per owner."""
        alice = LocalCache(tmp_path, "alice")
        bob = LocalCache(tmp_path, "bob")
        alice.save_transactions([_transaction()])

        assert bob.load_transactions() == []
        assert alice.path_for("transactions") != bob.path_for("transactions")

    def test_owner_id_is_sanitized_for_paths(self, tmp_path):
        """Test that path separators in owner ids stay inside the cache dir."""
        cache = LocalCache(tmp_path, "../evil/owner")
        assert cache.path_for("transactions").parent.parent == tmp_path

    def test_failed_write_returns_false(self, tmp_path):
        """Test that a write failure is reported without raising."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        cache = LocalCache(blocker, "alice")
        assert cache.save_transactions([_transaction()]) is False


def test_create_local_cache_uses_environment(tmp_path, monkeypatch):
    """Test that POCKETBOOK_CACHE_DIR sets the default cache root."""
    monkeypatch.setenv("POCKETBOOK_CACHE_DIR", str(tmp_path))
    cache = create_local_cache(owner_id="bob")
    assert cache.path_for("transactions") == tmp_path / "bob" / "transactions.json"
