"""Domain layer for pocketbook application.

Services are imported from their modules (``pocketbook.domain.ledger``,
``pocketbook.domain.category``); only entities and errors are re-exported
here so lower layers can import them without cycles.
"""

from pocketbook.domain.entities import (
    Category,
    CategoryAmount,
    ExchangeRate,
    MonthSummary,
    MutationStatus,
    Transaction,
    TransactionDraft,
    TransactionKind,
)
from pocketbook.domain.errors import (
    ConflictError,
    DomainError,
    GatewayError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "Category",
    "CategoryAmount",
    "ExchangeRate",
    "MonthSummary",
    "MutationStatus",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "ConflictError",
    "DomainError",
    "GatewayError",
    "NotFoundError",
    "ValidationError",
]
