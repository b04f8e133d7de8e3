"""Tests for the SQLAlchemy data gateway."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.database.factories import create_sqlite_gateway
from pocketbook.domain.entities import TransactionDraft, TransactionKind
from pocketbook.domain.errors import ConflictError, NotFoundError, ValidationError


def _draft(amount="42.10", kind="expense", txn_date=date(2024, 1, 20), category_id=None, note=None):
    return TransactionDraft(amount=amount, kind=kind, category_id=category_id, date=txn_date, note=note)


@pytest.fixture
def other_gateway(temp_db_path):
    """Gateway for a second owner on the same database."""
    gateway = create_sqlite_gateway(database_path=temp_db_path, owner_id="bob")
    yield gateway
    gateway.close()


class TestTransactions:
    """Tests for transaction storage."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, temp_gateway):
        """Test that the store fills in id, owner and timestamps."""
        txn = await temp_gateway.create_transaction(_draft(note="groceries"))

        assert txn.id and not txn.is_pending
        assert txn.owner_id == "alice"
        assert txn.amount == Decimal("42.10")
        assert txn.kind is TransactionKind.EXPENSE
        assert txn.date == date(2024, 1, 20)
        assert txn.note == "groceries"
        assert txn.created_at is not None

    @pytest.mark.asyncio
    async def test_smallest_amount_persists_unrounded(self, temp_gateway):
        """Test that a one-cent amount is stored as positive."""
        await temp_gateway.create_transaction(_draft(amount=Decimal("0.01")))

        listed = await temp_gateway.list_transactions()
        assert listed[0].amount == Decimal("0.01")
        with pytest.raises(ValidationError):
            _draft(amount=Decimal("0.004"))

    @pytest.mark.asyncio
    async def test_list_newest_first_with_date_range(self, temp_gateway):
        """Test listing order and date filters."""
        await temp_gateway.create_transaction(_draft(txn_date=date(2024, 1, 5)))
        await temp_gateway.create_transaction(_draft(txn_date=date(2024, 2, 5)))
        await temp_gateway.create_transaction(_draft(txn_date=date(2024, 3, 5)))

        all_txns = await temp_gateway.list_transactions()
        assert [txn.date.month for txn in all_txns] == [3, 2, 1]

        february = await temp_gateway.list_transactions(date(2024, 2, 1), date(2024, 2, 29))
        assert [txn.date for txn in february] == [date(2024, 2, 5)]

    @pytest.mark.asyncio
    async def test_update_changes_fields(self, temp_gateway):
        """Test that update applies changes and returns the stored record."""
        txn = await temp_gateway.create_transaction(_draft())
        updated = await temp_gateway.update_transaction(
            txn.id, {"amount": Decimal("50"), "kind": TransactionKind.INCOME, "note": "refund"}
        )

        assert updated.id == txn.id
        assert updated.amount == Decimal("50")
        assert updated.kind is TransactionKind.INCOME
        assert updated.note == "refund"
        assert (await temp_gateway.get_transaction(txn.id)) == updated

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, temp_gateway):
        """Test that only editable fields can be patched."""
        txn = await temp_gateway.create_transaction(_draft())
        with pytest.raises(ValidationError):
            await temp_gateway.update_transaction(txn.id, {"owner_id": "bob"})

    @pytest.mark.asyncio
    async def test_delete_removes_transaction(self, temp_gateway):
        """Test deleting a transaction."""
        txn = await temp_gateway.create_transaction(_draft())
        await temp_gateway.delete_transaction(txn.id)

        assert await temp_gateway.get_transaction(txn.id) is None
        with pytest.raises(NotFoundError):
            await temp_gateway.delete_transaction(txn.id)

    @pytest.mark.asyncio
    async def test_missing_transaction(self, temp_gateway):
        """Test that updates of unknown ids raise NotFoundError."""
        assert await temp_gateway.get_transaction("nope") is None
        with pytest.raises(NotFoundError):
            await temp_gateway.update_transaction("nope", {"note": "x"})

    @pytest.mark.asyncio
    async def test_unknown_category_is_rejected(self, temp_gateway):
        """Test that transactions must reference the owner's categories."""
        with pytest.raises(NotFoundError):
            await temp_gateway.create_transaction(_draft(category_id="missing"))

        txn = await temp_gateway.create_transaction(_draft())
        with pytest.raises(NotFoundError):
            await temp_gateway.update_transaction(txn.id, {"category_id": "missing"})

    @pytest.mark.asyncio
    async def test_owner_scoping(self, temp_gateway, other_gateway):
        """Test that one owner never sees or edits another owner's rows."""
        txn = await temp_gateway.create_transaction(_draft())

        assert await other_gateway.list_transactions() == []
        assert await other_gateway.get_transaction(txn.id) is None
        with pytest.raises(NotFoundError):
            await other_gateway.delete_transaction(txn.id)
        assert len(await temp_gateway.list_transactions()) == 1


class TestExchangeRates:
    """Tests for exchange-rate storage."""

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_updates(self, temp_gateway):
        """Test that one record is kept per month."""
        first = await temp_gateway.upsert_exchange_rate("2024-01", Decimal("800"))
        second = await temp_gateway.upsert_exchange_rate("2024-01", Decimal("805.25"))

        assert second.id == first.id
        assert second.value == Decimal("805.25")
        rates = await temp_gateway.list_exchange_rates()
        assert len(rates) == 1

    @pytest.mark.asyncio
    async def test_smallest_rate_persists_unrounded(self, temp_gateway):
        """Test that a rate with four decimals is stored exactly."""
        rate = await temp_gateway.upsert_exchange_rate("2024-02", Decimal("0.0001"))
        assert rate.value == Decimal("0.0001")
        assert (await temp_gateway.list_exchange_rates())[0].value > 0

    @pytest.mark.asyncio
    async def test_list_sorted_by_month(self, temp_gateway):
        """Test rate ordering."""
        await temp_gateway.upsert_exchange_rate("2024-03", Decimal("1"))
        await temp_gateway.upsert_exchange_rate("2023-12", Decimal("2"))
        assert [rate.month for rate in await temp_gateway.list_exchange_rates()] == ["2023-12", "2024-03"]

    @pytest.mark.asyncio
    async def test_rates_are_scoped_by_owner(self, temp_gateway, other_gateway):
        """Test that owners keep separate rates for the same month."""
        await temp_gateway.upsert_exchange_rate("2024-01", Decimal("800"))
        await other_gateway.upsert_exchange_rate("2024-01", Decimal("900"))

        assert (await temp_gateway.list_exchange_rates())[0].value == Decimal("800")
        assert (await other_gateway.list_exchange_rates())[0].value == Decimal("900")


class TestCategories:
    """Tests for category storage."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, temp_gateway):
        """Test categories are listed by kind, then name."""
        await temp_gateway.create_category("Transport", TransactionKind.EXPENSE)
        await temp_gateway.create_category("Salary", TransactionKind.INCOME)
        await temp_gateway.create_category("Food", "expense")

        names = [cat.name for cat in await temp_gateway.list_categories()]
        assert names == ["Food", "Transport", "Salary"]

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, temp_gateway):
        """Test that category names are unique per owner."""
        await temp_gateway.create_category("Food", TransactionKind.EXPENSE)
        with pytest.raises(ConflictError):
            await temp_gateway.create_category("Food", TransactionKind.EXPENSE)

    @pytest.mark.asyncio
    async def test_same_name_for_different_owners(self, temp_gateway, other_gateway):
        """Test that uniqueness does not cross owners."""
        await temp_gateway.create_category("Food", TransactionKind.EXPENSE)
        await other_gateway.create_category("Food", TransactionKind.EXPENSE)
        assert len(await other_gateway.list_categories()) == 1

    @pytest.mark.asyncio
    async def test_transaction_with_category(self, temp_gateway):
        """Test that a transaction can reference an owned category."""
        food = await temp_gateway.create_category("Food", TransactionKind.EXPENSE)
        txn = await temp_gateway.create_transaction(_draft(category_id=food.id))
        assert txn.category_id == food.id


def test_gateway_requires_owner(temp_db_path):
    """Test that an empty owner id is rejected."""
    from pocketbook.database.sqlalchemy_db import SQLAlchemyGateway

    with pytest.raises(ValidationError):
        SQLAlchemyGateway(f"sqlite:///{temp_db_path}", owner_id="")


def test_gateway_operations_are_awaitable():
    """Test that every store operation is a coroutine so callers never block on it."""
    import inspect

    from pocketbook.database.base import DataGateway

    operations = [name for name in DataGateway.__abstractmethods__ if name != "close"]
    assert operations
    for name in operations:
        assert inspect.iscoroutinefunction(getattr(DataGateway, name)), name
