"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, so the store schema can change
without touching the aggregation or mutation code.
"""

from pocketbook.domain import entities as domain
from pocketbook.database.models import (
    Category as ORMCategory,
    Transaction as ORMTransaction,
    ExchangeRate as ORMExchangeRate,
)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        kind=domain.TransactionKind(orm_category.kind),
        owner_id=orm_category.owner_id,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        amount=orm_transaction.amount,
        kind=domain.TransactionKind(orm_transaction.kind),
        category_id=orm_transaction.category_id,
        date=orm_transaction.date,
        note=orm_transaction.note,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def exchange_rate_to_domain(orm_rate: ORMExchangeRate) -> domain.ExchangeRate:
    """Convert SQLAlchemy ExchangeRate model to domain ExchangeRate entity."""
    return domain.ExchangeRate(
        id=orm_rate.id,
        owner_id=orm_rate.owner_id,
        month=orm_rate.month,
        value=orm_rate.value,
        updated_at=orm_rate.updated_at,
    )
