"""Aggregation of transaction lists into month and category summaries.

Every function here is pure: it reads the list it is given and returns new
values. Malformed entries (no recognizable month, unknown kind, amount that is
not a number) are skipped rather than raising, so a single bad record restored
from a cache never breaks a dashboard.
"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Union

from pocketbook.domain.entities import (
    CategoryAmount,
    ExchangeRate,
    MonthSummary,
    Transaction,
    TransactionKind,
)
from pocketbook.domain.errors import ValidationError, invalid_rate
from pocketbook.utils.date_parser import month_key, shift_month

ZERO = Decimal("0")
CENT = Decimal("0.01")


def _amount_of(txn: Transaction) -> Optional[Decimal]:
    amount = getattr(txn, "amount", None)
    if amount is None or isinstance(amount, bool):
        return None
    if isinstance(amount, Decimal):
        return amount if amount.is_finite() else None
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() else None


def _kind_of(txn: Transaction) -> Optional[TransactionKind]:
    kind = getattr(txn, "kind", None)
    try:
        return TransactionKind(kind)
    except ValueError:
        return None


def month_transactions(transactions: Iterable[Transaction], month: str) -> list[Transaction]:
    """Return the transactions dated within ``month``.

    Matching is done on the first seven characters of the date, so records
    holding "YYYY-MM" and records holding "YYYY-MM-DD" both match.
    """
    return [txn for txn in transactions if month_key(getattr(txn, "date", None)) == month]


def month_summary(transactions: Iterable[Transaction], month: str) -> MonthSummary:
    """Summarize income, expense and balance for one month.

    A month without transactions yields zeros.
    """
    income = ZERO
    expense = ZERO
    for txn in month_transactions(transactions, month):
        amount = _amount_of(txn)
        if amount is None:
            continue
        kind = _kind_of(txn)
        if kind is TransactionKind.INCOME:
            income += amount
        elif kind is TransactionKind.EXPENSE:
            expense += amount

    return MonthSummary(month=month, income=income, expense=expense, balance=income - expense)


def last_n_months_summary(
    transactions: Sequence[Transaction],
    n: int,
    reference_date: Union[date, str, None] = None,
) -> list[MonthSummary]:
    """Summaries for the ``n`` months ending at the reference month.

    Args:
        transactions: Transactions to summarize
        n: Number of months; zero or less yields an empty list
        reference_date: Date or month key of the newest month (default: today)

    Returns:
        Exactly ``n`` summaries, oldest first
    """
    if n <= 0:
        return []
    if reference_date is None:
        reference_date = date.today()
    reference = month_key(reference_date)
    if reference is None:
        raise ValidationError(f"Invalid reference date {reference_date!r}")

    months = [shift_month(reference, -offset) for offset in range(n - 1, -1, -1)]
    return [month_summary(transactions, month) for month in months]


def months_present(transactions: Iterable[Transaction]) -> list[str]:
    """Return the distinct month keys found in the data, oldest first."""
    months = {month_key(getattr(txn, "date", None)) for txn in transactions}
    months.discard(None)
    return sorted(months)


def all_months_summary(
    transactions: Sequence[Transaction], newest_first: bool = False
) -> list[MonthSummary]:
    """One summary per month present in the data.

    Ordered oldest first for trend lines; pass ``newest_first`` for tables.
    """
    months = months_present(transactions)
    if newest_first:
        months.reverse()
    return [month_summary(transactions, month) for month in months]


def category_breakdown(
    transactions: Iterable[Transaction],
    month: str,
    kind: Union[TransactionKind, str],
) -> list[CategoryAmount]:
    """Sum one kind of transaction per category for a month.

    Entries are sorted by descending amount. Categories with equal totals keep
    the order in which they were first encountered.
    """
    kind = TransactionKind.parse(kind)
    totals: dict[Optional[str], Decimal] = {}
    for txn in month_transactions(transactions, month):
        if _kind_of(txn) is not kind:
            continue
        amount = _amount_of(txn)
        if amount is None:
            continue
        category_id = getattr(txn, "category_id", None)
        totals[category_id] = totals.get(category_id, ZERO) + amount

    entries = [CategoryAmount(category_id=cid, amount=total) for cid, total in totals.items()]
    return sorted(entries, key=lambda entry: entry.amount, reverse=True)


def rate_for_month(rates: Iterable[ExchangeRate], month: str) -> Optional[ExchangeRate]:
    """Return the exchange rate recorded for a month, if any."""
    for rate in rates:
        if rate.month == month:
            return rate
    return None


def convert_summary(summary: MonthSummary, rate: Union[ExchangeRate, Decimal]) -> MonthSummary:
    """Express a summary in units of a manually entered rate.

    Each figure is divided by the rate value and rounded to cents.

    Raises:
        ValidationError: If the rate is not positive
    """
    value = rate.value if isinstance(rate, ExchangeRate) else rate
    if value is None or Decimal(value) <= 0:
        raise ValidationError(invalid_rate(value))
    value = Decimal(value)

    def convert(amount: Decimal) -> Decimal:
        return (amount / value).quantize(CENT, rounding=ROUND_HALF_UP)

    return MonthSummary(
        month=summary.month,
        income=convert(summary.income),
        expense=convert(summary.expense),
        balance=convert(summary.balance),
    )
