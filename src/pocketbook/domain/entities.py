"""Domain model entities for pocketbook.

These are pure data classes representing business concepts, independent of
the store schema. Gateways convert their own records into these entities, so
the aggregation and mutation logic never depends on how a store names its
fields.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from pocketbook.domain.errors import ValidationError, invalid_amount, invalid_kind, too_many_decimals


class TransactionKind(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: Union[str, "TransactionKind"]) -> "TransactionKind":
        """Convert a kind label into a TransactionKind.

        Raises:
            ValidationError: If the label is not a known kind
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(invalid_kind(value))


class MutationStatus(str, Enum):
    """Lifecycle state of an optimistic mutation."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    DISCARDED = "discarded"


# Fields a caller may change through an update patch
EDITABLE_TRANSACTION_FIELDS = frozenset({"amount", "kind", "category_id", "date", "note"})

# Prefix of ids assigned locally before the store confirms a create
TEMPORARY_ID_PREFIX = "tmp-"

# Decimal places the store keeps for transaction amounts and exchange rates
AMOUNT_PLACES = 2
RATE_PLACES = 4


def within_places(amount: Decimal, places: int) -> Decimal:
    """Return amount unchanged if it needs at most ``places`` decimal places.

    Raises:
        ValidationError: If storing the amount would round it
    """
    try:
        rounded = amount.quantize(Decimal(1).scaleb(-places))
    except InvalidOperation:
        raise ValidationError(invalid_amount(amount))
    if rounded != amount:
        raise ValidationError(too_many_decimals(amount, places))
    return amount


def positive_amount(value, places: Optional[int] = None) -> Decimal:
    """Coerce a value to a positive Decimal.

    Args:
        value: Number or numeric string
        places: Maximum number of decimal places, if limited

    Raises:
        ValidationError: If the value is not a number greater than zero, or
            has more decimal places than allowed
    """
    if isinstance(value, bool):
        raise ValidationError(invalid_amount(value))
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(invalid_amount(value))
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(invalid_amount(value))
    if places is not None:
        within_places(amount, places)
    return amount


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    name: str
    kind: TransactionKind
    owner_id: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``date`` is normally a ``datetime.date``; records restored from loosely
    typed sources may carry a ``"YYYY-MM"`` or ``"YYYY-MM-DD"`` string instead.
    """

    id: str
    owner_id: str
    amount: Decimal
    kind: TransactionKind
    category_id: Optional[str]
    date: Union[date, str]
    note: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        """True while the transaction only exists in the local view."""
        return self.id.startswith(TEMPORARY_ID_PREFIX)


@dataclass(frozen=True)
class TransactionDraft:
    """User-supplied fields of a transaction that has not been stored yet."""

    amount: Decimal
    kind: TransactionKind
    category_id: Optional[str]
    date: date
    note: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", positive_amount(self.amount, AMOUNT_PLACES))
        object.__setattr__(self, "kind", TransactionKind.parse(self.kind))


@dataclass(frozen=True)
class ExchangeRate:
    """Manually entered exchange rate for one month."""

    id: str
    owner_id: str
    month: str
    value: Decimal
    updated_at: datetime


@dataclass(frozen=True)
class MonthSummary:
    """Income, expense and balance for one month."""

    month: str
    income: Decimal
    expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class CategoryAmount:
    """Summed amount of one category within a breakdown."""

    category_id: Optional[str]
    amount: Decimal
