"""Utility functions for pocketbook."""

from pocketbook.utils.date_parser import parse_date, parse_month, month_key, shift_month
from pocketbook.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_month", "month_key", "shift_month", "parse_amount"]
