"""Tests for date, period and amount parsing."""

from datetime import date
from decimal import Decimal

import pytest

from finpro.domain.entities import Period
from finpro.utils.amount_parser import parse_amount, parse_balance
from finpro.utils.date_parser import parse_date, parse_period

TODAY = date(2024, 3, 15)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("today", date(2024, 3, 15)),
        ("Hoy", date(2024, 3, 15)),
        ("yesterday", date(2024, 3, 14)),
        ("ayer", date(2024, 3, 14)),
        ("tomorrow", date(2024, 3, 16)),
        ("mañana", date(2024, 3, 16)),
        ("in 3 days", date(2024, 3, 18)),
        ("20 days ago", date(2024, 2, 24)),
    ],
)
def test_parse_relative(text, expected):
    """Test parsing relative dates."""
    assert parse_date(text, today=TODAY) == expected


def test_parse_invalid_date():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("whenever")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("all", None),
        ("", None),
        ("this-month", Period(2024, 3)),
        ("last-month", Period(2024, 2)),
        ("this-year", Period(2024)),
        ("last-year", Period(2023)),
        ("2022", Period(2022)),
        ("2023-11", Period(2023, 11)),
    ],
)
def test_parse_period(text, expected):
    assert parse_period(text, today=TODAY) == expected


def test_last_month_in_january():
    assert parse_period("last-month", today=date(2024, 1, 10)) == Period(2023, 12)


@pytest.mark.parametrize("text", ["2023-13", "next-month", "20x4"])
def test_parse_period_invalid(text):
    with pytest.raises(ValueError, match="Unknown period"):
        parse_period(text, today=TODAY)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("-200", Decimal("-200")),
        ("-$20.00", Decimal("-20.00")),
        ("(15.50)", Decimal("-15.50")),
        ("€ 9", Decimal("9")),
    ],
)
def test_parse_balance(text, expected):
    assert parse_balance(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "NaN", "Infinity"])
def test_parse_balance_invalid(text):
    with pytest.raises(ValueError):
        parse_balance(text)


def test_parse_amount_requires_positive():
    assert parse_amount("12.50") == Decimal("12.50")
    with pytest.raises(ValueError, match="greater than zero"):
        parse_amount("0")
    with pytest.raises(ValueError, match="greater than zero"):
        parse_amount("-5")
