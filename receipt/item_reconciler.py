"""Cross-image candidate deduplication and discount folding."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from decimal import Decimal

from tillroll.domain.receipt import ZERO, ItemCandidate, Provenance, ReceiptItem, round_money

logger = logging.getLogger(__name__)

# Tunable heuristic tolerances, pinned by the deduplication tests.
DEDUP_TOP_TOLERANCE = 0.01  # normalized vertical distance between bbox tops
DEDUP_PRICE_TOLERANCE = Decimal("0.01")

_LEADING_MINUS = re.compile(r"^-")


def _is_duplicate(line_item: ItemCandidate, table_item: ItemCandidate) -> bool:
    if line_item.geometry is not None and table_item.geometry is not None:
        if abs(line_item.geometry.top - table_item.geometry.top) < DEDUP_TOP_TOLERANCE:
            return True
    return (
        line_item.name.lower() == table_item.name.lower()
        and abs(line_item.total_price - table_item.total_price) < DEDUP_PRICE_TOLERANCE
    )


def deduplicate_candidates(candidates: Sequence[ItemCandidate]) -> list[ItemCandidate]:
    """
    Merge table- and line-sourced detections of the same physical item.

    Table candidates are always kept. A line candidate is dropped when it sits
    at the same height as a table candidate or repeats its name and price.
    When unsure, both are kept: later stages tolerate a duplicate better
    than a missing item.

    Returns:
        Table candidates in order, followed by the surviving line candidates
    """
    table_items = [c for c in candidates if c.provenance is Provenance.TABLE]
    line_items = [c for c in candidates if c.provenance is Provenance.LINE]

    deduplicated = list(table_items)
    for line_item in line_items:
        if any(_is_duplicate(line_item, table_item) for table_item in table_items):
            logger.debug("Dropping line candidate %r duplicated by table row", line_item.name)
            continue
        deduplicated.append(line_item)
    return deduplicated


@dataclass
class DiscountFolding:
    items: list[ReceiptItem] = field(default_factory=list)
    unallocated_discount: Decimal = ZERO


def _offer_text(name: str) -> str:
    return _LEADING_MINUS.sub("", name).strip()


def fold_discounts(candidates: Sequence[ItemCandidate]) -> DiscountFolding:
    """
    Attach discount lines to the item they modify.

    A discount candidate (or any negative line) reduces the nearest preceding
    item and is recorded in that item's offer description. Discounts with no
    preceding item are accumulated as unallocated.
    """
    processed: list[ItemCandidate] = []
    unallocated = ZERO

    for candidate in candidates:
        if not (candidate.is_discount_candidate or candidate.total_price < 0):
            processed.append(replace(candidate))
            continue

        discount_amount = abs(candidate.total_price)
        # Discount lines never enter ``processed``, so the nearest real item is the last entry.
        target = processed[-1] if processed else None
        if target is None:
            unallocated += discount_amount
            logger.debug("Unallocated discount: %s from %r", discount_amount, candidate.name)
            continue

        target.discount_applied = round_money(target.discount_applied + discount_amount)
        target.total_price = round_money(target.total_price - discount_amount)
        offer_text = _offer_text(candidate.name)
        if target.offer_description:
            target.offer_description = f"{target.offer_description}; {offer_text}"
        else:
            target.offer_description = offer_text
        logger.debug("Attached discount %s from %r to %r", discount_amount, candidate.name, target.name)

    return DiscountFolding(
        items=[candidate.to_item() for candidate in processed],
        unallocated_discount=round_money(unallocated),
    )
