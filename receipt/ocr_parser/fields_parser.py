"""Store/date/summary field extraction helpers."""

import re
from collections.abc import Sequence
from decimal import Decimal

from tillroll.domain.receipt import OcrBlock, ReceiptMetadata

from .common import CURRENCY_BANNER, DATE_TOKEN, ITEM_COUNT, NUMERIC_ONLY, TOTAL_LOOSE, TOTAL_STRICT
from .prices import normalize_price
from .sections import ReceiptSections

_HAS_LETTER = re.compile(r"[a-zA-Z]")


def _text(block: OcrBlock) -> str:
    return (block.text or "").strip()


def _looks_like_header_text(text: str, min_length: int) -> bool:
    return (
        len(text) > min_length
        and text != CURRENCY_BANNER
        and _HAS_LETTER.search(text) is not None
        and not NUMERIC_ONLY.match(text)
    )


def _extract_store_name(header: Sequence[OcrBlock]) -> str:
    """First header line that reads like a trading name."""
    for line in header:
        text = _text(line)
        lower = text.lower()
        if _looks_like_header_text(text, 2) and "receipt" not in lower and "tel" not in lower:
            return text
    return ""


def _extract_store_location(header: Sequence[OcrBlock], store_name: str) -> str:
    """Address line printed directly under the store name (header lines 2-3)."""
    for line in header[1:3]:
        text = _text(line)
        if store_name and text == store_name:
            continue
        if _looks_like_header_text(text, 3):
            return text
    return ""


def _extract_date(lines: Sequence[OcrBlock]) -> str | None:
    """Raw ``dd/mm/yy[yy]`` token; not validated as a calendar date."""
    for line in lines:
        match = DATE_TOKEN.search(line.text or "")
        if match:
            return match.group(1)
    return None


def _extract_item_count(footer: Sequence[OcrBlock]) -> int | None:
    for line in footer:
        match = ITEM_COUNT.search(line.text or "")
        if match:
            return int(match.group(1))
    return None


def _extract_total(footer: Sequence[OcrBlock]) -> Decimal | None:
    """Scan footer lines bottom-up; the grand total is printed below subtotals."""
    for line in reversed(footer):
        text = line.text or ""
        strict = TOTAL_STRICT.search(text)
        if strict:
            return normalize_price(strict.group(3))
        loose = TOTAL_LOOSE.search(text)
        if loose:
            return normalize_price(loose.group(1))
    return None


def extract_metadata(sections: ReceiptSections, metadata: ReceiptMetadata) -> None:
    """
    Fill still-empty receipt fields from one image.

    Fields already set by an earlier image are not recomputed.

    Args:
        sections: Sectioned LINE blocks of the current image
        metadata: Cross-image accumulator, updated in place
    """
    if not metadata.is_set("store_name"):
        metadata.merge_if_absent("store_name", _extract_store_name(sections.header))

    if not metadata.is_set("store_location") and len(sections.header) > 1:
        store_name = _extract_store_name(sections.header)
        metadata.merge_if_absent("store_location", _extract_store_location(sections.header, store_name))

    if not metadata.is_set("purchase_date"):
        metadata.merge_if_absent("purchase_date", _extract_date(sections.lines))

    if not metadata.is_set("printed_item_count"):
        metadata.merge_if_absent("printed_item_count", _extract_item_count(sections.footer))

    if not metadata.is_set("printed_total"):
        metadata.merge_if_absent("printed_total", _extract_total(sections.footer))
