"""Map a ParseResult onto the field updates of a stored receipt record."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from tillroll.domain.receipt import ParseResult

MIN_ACCEPTABLE_CONFIDENCE = 50
MAX_PLAUSIBLE_TOTAL = Decimal("2000")
UNKNOWN_STORE = "Unknown Store"

_RAW_DATE = re.compile(r"\d{2}/\d{2}/\d{2,4}")
_HAS_LETTER = re.compile(r"[a-zA-Z]")


def is_confident_store_name(name: str) -> bool:
    return len(name) >= 3 and name != "GBP" and not name.isdigit() and _HAS_LETTER.search(name) is not None


def resolve_store_name(extracted: str, hint: str | None) -> str:
    """OCR name when it looks real, else the caller's name, else a placeholder."""
    if is_confident_store_name(extracted):
        return extracted
    if hint and hint != UNKNOWN_STORE:
        return hint
    return extracted or hint or UNKNOWN_STORE


def iso_purchase_date(raw: str | None) -> str | None:
    """Convert a raw ``dd/mm/yy[yy]`` token into ``yyyy-mm-dd``.

    Two-digit years are taken as 20yy. The result is not calendar-validated.
    """
    if not raw or not _RAW_DATE.search(raw):
        return None
    parts = raw.split("/")
    if len(parts) != 3:
        return None
    day, month, year = parts
    if len(year) == 2:
        year = f"20{year}"
    return f"{year}-{month}-{day}"


def needs_manual_review(result: ParseResult) -> bool:
    return not result.items or result.quality.confidence_score < MIN_ACCEPTABLE_CONFIDENCE


def build_receipt_update(
    result: ParseResult,
    *,
    store_name_hint: str | None = None,
    total_amount_hint: Decimal | None = None,
) -> dict[str, Any]:
    """Field updates for the receipt record after a parse."""
    if needs_manual_review(result):
        return {"validation_status": "failed_processing", "items": []}

    metadata = result.metadata
    reconciliation = result.reconciliation

    total_amount = total_amount_hint or Decimal("0")
    printed_total = reconciliation.printed_total
    if not total_amount and printed_total is not None and 0 < printed_total < MAX_PLAUSIBLE_TOTAL:
        total_amount = printed_total

    update: dict[str, Any] = {
        "items": [item.to_dict() for item in result.items],
        "supermarket": resolve_store_name(metadata.store_name, store_name_hint),
        "total_discounts": float(metadata.total_discounts),
        "validation_status": "processing_background",
        "total_amount": float(total_amount),
    }

    location = metadata.store_location
    if len(location) >= 3 and _HAS_LETTER.search(location):
        update["store_location"] = location

    purchase_date = iso_purchase_date(metadata.purchase_date)
    if purchase_date:
        update["purchase_date"] = purchase_date

    if reconciliation.printed_total is not None:
        update["ocr_receipt_total"] = float(reconciliation.printed_total)
    if reconciliation.printed_count is not None:
        update["ocr_receipt_item_count"] = reconciliation.printed_count
    update["computed_total_excl_discounts"] = float(reconciliation.computed_total)
    update["computed_count_excl_discounts"] = reconciliation.computed_count
    if reconciliation.total_delta is not None:
        update["ocr_total_delta"] = float(reconciliation.total_delta)
    update["ocr_total_mismatch"] = reconciliation.total_mismatch
    if reconciliation.count_delta is not None:
        update["ocr_count_delta"] = reconciliation.count_delta
    update["ocr_count_mismatch"] = reconciliation.count_mismatch

    return update
