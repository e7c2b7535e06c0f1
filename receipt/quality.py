"""Reconciliation against printed totals and parse confidence scoring."""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal

from tillroll.domain.receipt import ZERO, ParseQuality, Reconciliation, ReceiptItem, ReceiptMetadata, round_money

TOTAL_MISMATCH_TOLERANCE = Decimal("0.05")  # exclusive

# Confidence score weights
FULL_ITEM_COUNT = 5
ITEM_COUNT_WEIGHT = 40
PER_ITEM_WEIGHT = 5
VALID_PRICE_RATIO_THRESHOLD = 0.8
VALID_PRICE_WEIGHT = 20
SOURCE_WEIGHT = 10
EXTRACTED_TOTAL_WEIGHT = 10
MAX_CONFIDENCE = 100


def _is_priced_item(item: ReceiptItem) -> bool:
    # Discount-only leftovers (zero or negative after folding) are excluded.
    return item.total_price > 0


def reconcile(items: Sequence[ReceiptItem], metadata: ReceiptMetadata) -> Reconciliation:
    """Compare the printed total/count with the totals computed from items.

    A missing printed value is not a mismatch: its delta stays None.
    """
    priced = [item for item in items if _is_priced_item(item)]
    computed_total = round_money(sum((item.total_price for item in priced), ZERO))
    computed_count = len(priced)

    total_delta: Decimal | None = None
    total_mismatch = False
    if metadata.printed_total is not None:
        total_delta = round_money(metadata.printed_total - computed_total)
        total_mismatch = abs(total_delta) > TOTAL_MISMATCH_TOLERANCE

    count_delta: int | None = None
    count_mismatch = False
    if metadata.printed_item_count is not None:
        count_delta = metadata.printed_item_count - computed_count
        count_mismatch = count_delta != 0

    return Reconciliation(
        printed_total=metadata.printed_total,
        computed_total=computed_total,
        total_delta=total_delta,
        total_mismatch=total_mismatch,
        printed_count=metadata.printed_item_count,
        computed_count=computed_count,
        count_delta=count_delta,
        count_mismatch=count_mismatch,
    )


def valid_price_ratio(items: Sequence[ReceiptItem]) -> float:
    if not items:
        return 0.0
    return sum(1 for item in items if item.total_price > 0) / len(items)


def score_confidence(
    item_count: int,
    price_ratio: float,
    table_item_count: int,
    line_item_count: int,
    has_extracted_total: bool,
) -> int:
    """
    Score parse quality from 0 to 100.

    Signals:
    - item count: 40 for five or more items, otherwise 5 per item
    - valid-price ratio: 20 at 0.8 or above, otherwise proportional
    - 10 each for table items, line items and a printed total
    """
    score = 0.0
    if item_count >= FULL_ITEM_COUNT:
        score += ITEM_COUNT_WEIGHT
    else:
        score += item_count * PER_ITEM_WEIGHT

    if price_ratio >= VALID_PRICE_RATIO_THRESHOLD:
        score += VALID_PRICE_WEIGHT
    else:
        score += price_ratio * VALID_PRICE_WEIGHT

    if table_item_count > 0:
        score += SOURCE_WEIGHT
    if line_item_count > 0:
        score += SOURCE_WEIGHT
    if has_extracted_total:
        score += EXTRACTED_TOTAL_WEIGHT

    return max(0, min(MAX_CONFIDENCE, math.floor(score + 0.5)))


def assess_quality(
    items: Sequence[ReceiptItem],
    *,
    table_item_count: int,
    line_item_count: int,
    rejected_line_count: int,
    has_extracted_total: bool,
    has_extracted_item_count: bool,
) -> ParseQuality:
    ratio = valid_price_ratio(items)
    return ParseQuality(
        item_count=len(items),
        table_item_count=table_item_count,
        line_item_count=line_item_count,
        rejected_line_count=rejected_line_count,
        valid_price_ratio=ratio,
        has_multipliers=any(item.quantity > 1 for item in items),
        has_extracted_total=has_extracted_total,
        has_extracted_item_count=has_extracted_item_count,
        confidence_score=score_confidence(
            len(items),
            ratio,
            table_item_count,
            line_item_count,
            has_extracted_total,
        ),
    )
