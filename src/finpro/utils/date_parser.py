"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from finpro.domain.entities import Period

_RELATIVE_DAYS = {
    "today": 0,
    "hoy": 0,
    "yesterday": -1,
    "ayer": -1,
    "tomorrow": 1,
    "mañana": 1,
}


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    ones: "today", "yesterday", "tomorrow" (also in Spanish), "in 3 days"
    and "3 days ago".

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])

    words = text.split()
    if len(words) == 3 and words[0] == "in" and words[2] in ("day", "days") and words[1].isdigit():
        return today + timedelta(days=int(words[1]))
    if len(words) == 3 and words[2] == "ago" and words[1] in ("day", "days") and words[0].isdigit():
        return today - timedelta(days=int(words[0]))

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def parse_period(period_str: Optional[str], today: Optional[date] = None) -> Optional[Period]:
    """Parse a reporting period.

    Accepts "all" (returns None), "this-month", "last-month", "this-year",
    "last-year", "YYYY" and "YYYY-MM".

    Raises:
        ValueError: If the period is not recognized
    """
    if period_str is None:
        return None
    text = period_str.strip().lower()
    today = today or date.today()

    if text in ("", "all"):
        return None
    if text == "this-month":
        return Period(today.year, today.month)
    if text == "last-month":
        previous = today - relativedelta(months=1)
        return Period(previous.year, previous.month)
    if text == "this-year":
        return Period(today.year)
    if text == "last-year":
        return Period(today.year - 1)

    parts = text.split("-")
    try:
        if len(parts) == 1:
            return Period(int(parts[0]))
        if len(parts) == 2:
            month = int(parts[1])
            if 1 <= month <= 12:
                return Period(int(parts[0]), month)
    except ValueError:
        pass
    raise ValueError(
        f"Unknown period: '{period_str}'. Supported periods: all, this-month, "
        "last-month, this-year, last-year, YYYY, YYYY-MM"
    )
