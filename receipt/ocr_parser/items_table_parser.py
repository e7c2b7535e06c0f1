"""Table-structure receipt item extraction."""

from collections import defaultdict
from decimal import Decimal

from tillroll.domain.receipt import BlockType, ItemCandidate, OcrBlock, Provenance, round_money

from ..ocr_blocks import BlockIndex
from .common import (
    AMOUNT_IN_TEXT,
    LEADING_PRODUCT_CODE,
    MAX_ITEM_PRICE,
    NUMERIC_ONLY,
    TAX_MARKER,
    is_discount_candidate,
    is_table_non_item,
    strip_tax_marker,
)
from .prices import normalize_price

MIN_DESCRIPTION_LENGTH = 3


def _find_price_column(cell_texts: list[str]) -> tuple[int, Decimal] | None:
    """Rightmost cell holding a plausible amount, skipping tax-code cells."""
    for i in range(len(cell_texts) - 1, -1, -1):
        text = cell_texts[i]
        if TAX_MARKER.match(text):
            continue
        if AMOUNT_IN_TEXT.search(text):
            price = normalize_price(text)
            if price != 0 and abs(price) < MAX_ITEM_PRICE:
                return i, price
    return None


def _find_description(cell_texts: list[str], price_idx: int) -> str:
    """Longest text cell left of the price column."""
    description = ""
    for text in cell_texts[:price_idx]:
        if not text or NUMERIC_ONLY.match(text) or len(text) < 2 or TAX_MARKER.match(text):
            continue
        if len(text) > len(description):
            description = text
    if description:
        description = strip_tax_marker(LEADING_PRODUCT_CODE.sub("", description))
    return description


def _group_rows(cells: list[OcrBlock]) -> dict[int, list[OcrBlock]]:
    rows: dict[int, list[OcrBlock]] = defaultdict(list)
    for cell in cells:
        if cell.row_index is not None:
            rows[cell.row_index].append(cell)
    return rows


def extract_table_items(index: BlockIndex) -> list[ItemCandidate]:
    """
    Extract item candidates from the table structure of one image.

    Each table row with at least two cells yields at most one candidate:
    the rightmost plausible amount is the price, the longest text cell to
    its left is the description.
    """
    items: list[ItemCandidate] = []
    if not index.of_type(BlockType.TABLE):
        return items

    rows = _group_rows(index.of_type(BlockType.CELL))
    for row_index in sorted(rows):
        cells = sorted(rows[row_index], key=lambda cell: cell.column_index or 0)
        if len(cells) < 2:
            continue

        cell_texts = [index.cell_text(cell) for cell in cells]
        price_column = _find_price_column(cell_texts)
        if price_column is None:
            continue
        price_idx, price = price_column

        description = _find_description(cell_texts, price_idx)
        if len(description) < MIN_DESCRIPTION_LENGTH or is_table_non_item(description):
            continue

        amount = round_money(price)
        items.append(
            ItemCandidate(
                name=description,
                unit_price=amount,
                total_price=amount,
                provenance=Provenance.TABLE,
                geometry=cells[0].geometry,
                is_discount_candidate=is_discount_candidate(description, price),
            )
        )

    return items
