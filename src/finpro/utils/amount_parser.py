"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_balance(amount_str: str) -> Decimal:
    """Parse a balance string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = re.sub(r"[$€£¥\s]", "", text).replace(",", "")
    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:]

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_amount(amount_str: str) -> Decimal:
    """Parse a transaction amount, which must be greater than zero.

    The transaction type carries the direction, so a negative amount is an
    error rather than being silently flipped.

    Raises:
        ValueError: If the string is not a positive amount
    """
    amount = parse_balance(amount_str)
    if amount <= 0:
        raise ValueError(f"Amount must be greater than zero (got '{amount_str}')")
    return amount
