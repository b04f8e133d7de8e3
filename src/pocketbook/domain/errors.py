"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class GatewayError(DomainError):
    """Transport or authorization failure reported by a data gateway."""


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def invalid_amount(amount) -> str:
    """Return message for a non-positive or unparseable amount."""
    return f"Amount must be a positive number, got {amount!r}"


def invalid_kind(kind) -> str:
    """Return message for an unknown transaction kind."""
    return f"Kind must be 'income' or 'expense', got {kind!r}"


def invalid_month(month) -> str:
    """Return message for a malformed month key."""
    return f"Month must be formatted as YYYY-MM, got {month!r}"


def invalid_rate(value) -> str:
    """Return message for a non-positive exchange rate."""
    return f"Exchange rate must be a positive number, got {value!r}"


def unknown_patch_fields(fields: list[str]) -> str:
    """Return message for patch keys that are not editable."""
    return f"Cannot update field{'s' if len(fields) != 1 else ''}: {', '.join(sorted(fields))}"


def duplicate_exchange_rate(month: str) -> str:
    """Return message for a second rate record in the same month."""
    return f"Exchange rate for {month} already exists"


def too_many_decimals(value, places: int) -> str:
    """Return message for a number the store would have to round."""
    return f"At most {places} decimal places are allowed, got {value}"
