"""Utility functions for finpro."""

from finpro.utils.date_parser import parse_date, parse_period
from finpro.utils.amount_parser import parse_amount, parse_balance
from finpro.utils.resolver import resolve_account, resolve_category, resolve_debt

__all__ = [
    "parse_date",
    "parse_period",
    "parse_amount",
    "parse_balance",
    "resolve_account",
    "resolve_category",
    "resolve_debt",
]
