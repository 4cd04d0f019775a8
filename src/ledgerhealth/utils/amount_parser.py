"""Amount parsing utilities."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re
from typing import Any, Optional

CENTS = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45" / "₱123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥₱]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def to_amount(value: Any) -> Optional[Decimal]:
    """Coerce a JSON value into a Decimal amount.

    None and blank strings mean "no amount" and return None. Numbers are
    converted through ``str`` so that floats keep their printed precision.

    Raises:
        ValueError: If the value is not a number or numeric string
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount '{value}'")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return parse_amount(str(value))
    if isinstance(value, str):
        if not value.strip():
            return None
        return parse_amount(value)
    raise ValueError(f"Could not parse amount '{value}'")


def to_money(value: Any) -> Optional[Decimal]:
    """Coerce a JSON value into an amount rounded half-up to cents.

    Raises:
        ValueError: If the value is not a number or numeric string
    """
    amount = to_amount(value)
    if amount is None:
        return None
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
