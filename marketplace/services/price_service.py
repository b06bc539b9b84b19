"""Price codec: integer cents as a digit string inside the client.

The edit wizard stores prices as a string of digits whose last two digits are
cents ("23000000" == $230,000.00), so typing never goes through a float.
Conversion to and from the server's decimal amount happens only here:

- API → form: 230000.00 → "23000000"
- form → API: "23000000" → "230000.00"
- form → display: "23000000" → "230,000.00"
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from marketplace.core.logging import get_logger

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D")
_NON_NUMERIC = re.compile(r"[^0-9.]")

Amount = Union[int, float, str, Decimal]


def sanitize_price_input(raw: Optional[str]) -> str:
    """Keep only the digits of whatever the user typed."""
    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def dollars_to_cents_digits(amount: Optional[Amount]) -> str:
    """Convert a server amount in dollars to the internal cents digit string.

    Strings are cleaned of formatting first ("$230,000.00" → 230000.00).
    Returns "" for missing, negative or unparseable input.
    """
    if amount is None:
        return ""

    if isinstance(amount, str):
        cleaned = _NON_NUMERIC.sub("", amount)
        if not cleaned:
            return ""
        amount = cleaned

    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        logger.warning("Failed to parse price amount from: '%s'", amount)
        return ""

    if not value.is_finite() or value < 0:
        return ""

    cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return str(int(cents))


def display_price_to_cents_digits(display: Optional[str]) -> str:
    """Fallback for view models that only carry "$350,000": whole dollars → cents."""
    digits = sanitize_price_input(display)
    if not digits:
        return ""
    return str(int(digits) * 100)


def _split_cents(digits: str) -> tuple[int, str]:
    padded = digits.rjust(3, "0")
    return int(padded[:-2]), padded[-2:]


def cents_digits_to_api(digits: Optional[str]) -> str:
    """Convert the internal digit string to the decimal string the server expects."""
    digits = sanitize_price_input(digits)
    if not digits:
        return "0.00"
    dollars, cents = _split_cents(digits)
    return f"{dollars}.{cents}"


def format_price_input(digits: Optional[str]) -> str:
    """Render the internal digit string with thousands separators."""
    digits = sanitize_price_input(digits)
    if not digits:
        return "0.00"
    dollars, cents = _split_cents(digits)
    return f"{dollars:,}.{cents}"


def is_positive_price(digits: Optional[str]) -> bool:
    digits = sanitize_price_input(digits)
    return bool(digits) and int(digits) > 0
