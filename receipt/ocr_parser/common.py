"""Shared patterns and line classification for OCR receipt parsing.

Both item extractors classify text through the helpers in this module so that
the table and line parsers agree on what is a discount, a summary phrase or
store-identity leakage.
"""

import re
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum

# Candidate price limits (exclusive). Anything outside is treated as noise.
MAX_ITEM_PRICE = 500

# Lines that start the footer section (totals, VAT, payment terminal output).
FOOTER_KEYWORDS = re.compile(
    r"total\b|goods:|subtotal|vat|card number|authorisation|approved|contactless|"
    r"merchant id|terminal id|eft no|change|debit|mastercard|visa|amount due",
)

# Header lines: literal currency banner printed above item lists.
CURRENCY_BANNER = "GBP"

DATE_TOKEN = re.compile(r"\b(\d{2}/\d{2}/\d{2,4})\b")
ITEM_COUNT = re.compile(r"\b(\d+)\s+items?\b", re.IGNORECASE)
TOTAL_STRICT = re.compile(r"(total)\s*:?\s*(gbp|£)?\s*(\d+[.,]\d{2})", re.IGNORECASE)
TOTAL_LOOSE = re.compile(r"\btotal\b.*\b(\d+[.,]\d{2})\b", re.IGNORECASE)

# Price-ish tokens
AMOUNT_IN_TEXT = re.compile(r"-?\d+[.,]\d{2}")
TRAILING_PRICE = re.compile(r"(-?\d+[.,]\d{2})\s*[A-Z]?\s*$")
TAX_MARKER = re.compile(r"^[A-Z]$")
TRAILING_TAX_MARKER = re.compile(r"\s+[A-Z]$")
NUMERIC_ONLY = re.compile(r"^\d+$")
LEADING_QUANTITY = re.compile(r"^\d+\s+")
LEADING_PRODUCT_CODE = re.compile(r"^\d{5,}\s*")

# Multiplier lines ("3 x 1.50", "3 x") and lone prices ("1.50").
FULL_MULTIPLIER = re.compile(r"^\s*(\d+)\s*x\s*(\d+[.,]\d{2})\s*$")
QUANTITY_ONLY = re.compile(r"^\s*(\d+)\s*x\s*$")
PRICE_ONLY = re.compile(r"^\s*(\d+[.,]\d{2})\s*$")
TIMESTAMP = re.compile(r"^\d{2}:\d{2}:\d{2}|^\d{2}/\d{2}/\d{4}")

DISCOUNT_KEYWORDS = re.compile(
    r"discount|saving|offer|clubcard|nectar|more points|voucher|promo",
    re.IGNORECASE,
)

# Table rows carrying these phrases are receipt furniture, not purchases.
TABLE_NON_ITEM_PHRASES = (
    "more points",
    "balance before",
    "card payment",
    "number of items",
    "total",
    "subtotal",
    "change",
)

# Free-text lines carrying these phrases are staff/service/loyalty furniture.
LINE_NON_ITEM_PHRASES = (
    "store manager",
    "customer services",
    "number of items",
    "balance before",
    "more card",
)
LINE_NON_ITEM_EXACT = ("card",)

# Store-identity tokens that leak from the header into the item area.
DEFAULT_STORE_PREFIXES = (
    "tesco",
    "sainsbury",
    "morrisons",
    "aldi",
    "asda",
    "lidl",
    "waitrose",
    "co-op",
    "store",
    "branch",
)


class LineClass(str, Enum):
    """Coarse classification of a candidate item name."""

    ITEM = "item"
    DISCOUNT = "discount"
    NON_ITEM = "non_item"
    STORE_IDENTITY = "store_identity"


def is_discount_text(name: str) -> bool:
    return bool(DISCOUNT_KEYWORDS.search(name or ""))


def is_discount_candidate(name: str, price: Decimal) -> bool:
    """Return True if a parsed line looks like a discount rather than a purchase."""
    if price < 0:
        return True
    return is_discount_text(name)


def is_table_non_item(description: str) -> bool:
    lower = description.lower()
    return any(phrase in lower for phrase in TABLE_NON_ITEM_PHRASES)


def starts_with_store_prefix(name: str, store_prefixes: Iterable[str] = DEFAULT_STORE_PREFIXES) -> bool:
    lower = name.lower()
    return any(lower.startswith(prefix.lower()) for prefix in store_prefixes if prefix)


def classify_line_name(name: str, store_prefixes: Iterable[str] = DEFAULT_STORE_PREFIXES) -> LineClass:
    """Classify a cleaned free-text item name."""
    lower = name.lower()
    if any(phrase in lower for phrase in LINE_NON_ITEM_PHRASES) or lower in LINE_NON_ITEM_EXACT:
        return LineClass.NON_ITEM
    if starts_with_store_prefix(lower, store_prefixes):
        return LineClass.STORE_IDENTITY
    if is_discount_text(name):
        return LineClass.DISCOUNT
    return LineClass.ITEM


def strip_product_codes(text: str) -> str:
    """Remove a leading quantity and/or long product code from a line."""
    cleaned = LEADING_QUANTITY.sub("", text.strip())
    cleaned = LEADING_PRODUCT_CODE.sub("", cleaned)
    return cleaned.strip()


def strip_tax_marker(text: str) -> str:
    """Remove a trailing single-letter VAT/tax code (e.g. ``"Milk A"``)."""
    return TRAILING_TAX_MARKER.sub("", text).strip()
