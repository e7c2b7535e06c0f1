"""Price token normalization."""

import re
from decimal import Decimal, InvalidOperation

_CURRENCY_AND_SPACE = re.compile(r"[£$€\s]")
_BARE_PENCE = re.compile(r"^-?\d+$")
_COMMA_DECIMAL = re.compile(r"^-?\d+,\d+$")
_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")

# Positive amounts above this are assumed to be pence printed without a point.
PENCE_OVERFLOW_THRESHOLD = Decimal("1000")


def normalize_price(token: str | None) -> Decimal:
    """
    Turn a raw price token into a signed Decimal amount.

    Handles currency symbols, comma decimal separators and card-terminal
    totals printed as bare pence ("1234" -> 12.34). Unparseable input yields 0.

    Examples:
        "£12.34" -> 12.34
        "-3,50"  -> -3.50
        "1234"   -> 12.34
    """
    if not token:
        return Decimal("0")

    is_negative = token.strip().startswith("-")
    cleaned = _CURRENCY_AND_SPACE.sub("", token)

    digits = cleaned.replace("-", "")
    if _BARE_PENCE.match(cleaned) and len(digits) >= 3:
        cleaned = f"{'-' if is_negative else ''}{digits[:-2] or '0'}.{digits[-2:]}"
    elif _COMMA_DECIMAL.match(cleaned):
        cleaned = cleaned.replace(",", ".")
    else:
        cleaned = _NON_NUMERIC.sub("", cleaned)

    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return Decimal("0")
    try:
        value = Decimal(match.group(0))
    except InvalidOperation:
        return Decimal("0")

    if abs(value) > PENCE_OVERFLOW_THRESHOLD and not is_negative:
        return value / 100
    return value
