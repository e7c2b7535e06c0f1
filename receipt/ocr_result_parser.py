"""Parse document-analysis blocks from one or more receipt images into a ParseResult."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from tillroll.domain.receipt import ItemCandidate, OcrBlock, ParseResult, ReceiptMetadata, round_money

from .item_reconciler import deduplicate_candidates, fold_discounts
from .ocr_blocks import BlockIndex
from .ocr_parser import extract_line_items, extract_metadata, extract_table_items, sectionize
from .ocr_parser.common import DEFAULT_STORE_PREFIXES
from .quality import assess_quality, reconcile

UNKNOWN_STORE = "Unknown Store"
MAX_HINT_DIGITS = 20


@dataclass
class _ReceiptAccumulator:
    """Per-invocation state shared across the images of one receipt."""

    metadata: ReceiptMetadata = field(default_factory=ReceiptMetadata)
    candidates: list[ItemCandidate] = field(default_factory=list)
    table_item_count: int = 0
    line_item_count: int = 0
    rejected_line_count: int = 0
    warnings: list[str] = field(default_factory=list)


def _parse_page(
    blocks: Sequence[OcrBlock],
    accumulator: _ReceiptAccumulator,
    store_prefixes: tuple[str, ...],
) -> None:
    index = BlockIndex(blocks)
    sections = sectionize(index.text_lines())
    extract_metadata(sections, accumulator.metadata)

    # Both extractors read the same page independently; results are joined
    # table-first before being appended to the receipt-wide list.
    table_items = extract_table_items(index)
    line_extraction = extract_line_items(sections.body, store_prefixes)

    accumulator.candidates.extend(table_items)
    accumulator.candidates.extend(line_extraction.items)
    accumulator.table_item_count += len(table_items)
    accumulator.line_item_count += len(line_extraction.items)
    accumulator.rejected_line_count += line_extraction.rejected_count
    accumulator.warnings.extend(line_extraction.warnings)


def _apply_hints(
    metadata: ReceiptMetadata,
    store_name_hint: str | None,
    total_amount_hint: Decimal | float | None,
) -> None:
    """Caller-supplied values only fill fields OCR left empty."""
    if store_name_hint and store_name_hint != UNKNOWN_STORE:
        metadata.merge_if_absent("store_name", store_name_hint)
    if not total_amount_hint:
        return
    try:
        total = Decimal(str(total_amount_hint))
    except InvalidOperation:
        return
    # NaN, infinities and amounts too large to quantize are ignored
    if total.is_finite() and total.adjusted() < MAX_HINT_DIGITS:
        metadata.merge_if_absent("printed_total", round_money(total))


def parse_receipt(
    pages: Iterable[Sequence[OcrBlock] | None],
    *,
    store_name_hint: str | None = None,
    total_amount_hint: Decimal | float | None = None,
    known_stores: Iterable[str] | None = None,
) -> ParseResult:
    """
    Parse all images of one receipt.

    Args:
        pages: One block list per image, in the order the caller supplied the
            images. ``None`` or an empty list is treated as "no data".
        store_name_hint: Fallback store name when OCR finds none
        total_amount_hint: Fallback printed total when OCR finds none
        known_stores: Extra store-name tokens rejected as header leakage

    Returns:
        Deduplicated, discount-folded items with reconciliation and quality blocks
    """
    store_prefixes = tuple(DEFAULT_STORE_PREFIXES) + tuple(known_stores or ())
    accumulator = _ReceiptAccumulator()

    for page_number, blocks in enumerate(pages, start=1):
        if not blocks:
            accumulator.warnings.append(f"image {page_number}: no analysis data")
            continue
        _parse_page(blocks, accumulator, store_prefixes)

    metadata = accumulator.metadata
    has_extracted_total = metadata.printed_total is not None
    has_extracted_item_count = metadata.printed_item_count is not None
    _apply_hints(metadata, store_name_hint, total_amount_hint)

    deduplicated = deduplicate_candidates(accumulator.candidates)
    folding = fold_discounts(deduplicated)
    metadata.add_unallocated_discount(folding.unallocated_discount)

    reconciliation = reconcile(folding.items, metadata)
    quality = assess_quality(
        folding.items,
        table_item_count=accumulator.table_item_count,
        line_item_count=accumulator.line_item_count,
        rejected_line_count=accumulator.rejected_line_count,
        has_extracted_total=has_extracted_total,
        has_extracted_item_count=has_extracted_item_count,
    )

    return ParseResult(
        items=folding.items,
        metadata=metadata,
        reconciliation=reconciliation,
        quality=quality,
        warnings=accumulator.warnings,
    )
