"""Data models for receipt parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal | int) -> Decimal:
    """Round an amount to 2 decimal places, half away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class BlockType(str, Enum):
    LINE = "LINE"
    TABLE = "TABLE"
    CELL = "CELL"
    WORD = "WORD"


class Provenance(str, Enum):
    TABLE = "table"
    LINE = "line"


@dataclass(frozen=True)
class BoundingBox:
    """Normalized (0-1) bounding box reported by the document-analysis service."""

    top: float = 0.0
    left: float = 0.0
    height: float = 0.0
    width: float = 0.0


@dataclass(frozen=True)
class OcrBlock:
    """One recognized unit (line, table, cell or word) of an analysed image."""

    id: str
    block_type: BlockType
    text: str | None = None
    geometry: BoundingBox | None = None
    row_index: int | None = None
    column_index: int | None = None
    child_ids: tuple[str, ...] = ()


@dataclass
class ItemCandidate:
    """A tentative purchased item, before deduplication and discount folding."""

    name: str
    unit_price: Decimal
    total_price: Decimal
    provenance: Provenance
    quantity: int = 1
    discount_applied: Decimal = ZERO
    offer_description: str = ""
    category: str = "other"
    geometry: BoundingBox | None = None
    is_discount_candidate: bool = False

    def to_item(self) -> ReceiptItem:
        """Drop provenance, geometry and the discount flag."""
        return ReceiptItem(
            name=self.name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price,
            discount_applied=self.discount_applied,
            offer_description=self.offer_description,
            category=self.category,
        )


@dataclass(frozen=True)
class ReceiptItem:
    """A finalized receipt line item."""

    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    discount_applied: Decimal = ZERO
    offer_description: str = ""
    category: str = "other"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "total_price": float(self.total_price),
            "discount_applied": float(self.discount_applied),
            "offer_description": self.offer_description,
            "category": self.category,
        }


# Fields that follow first-non-empty-wins across images.
MERGEABLE_METADATA_FIELDS = (
    "store_name",
    "store_location",
    "purchase_date",
    "printed_item_count",
    "printed_total",
)


def _is_absent(value: object) -> bool:
    return value is None or value == ""


@dataclass
class ReceiptMetadata:
    """Receipt-level fields accumulated across all images of one receipt.

    Every mergeable field is immutable once set: later images can only fill
    fields that are still empty. ``total_discounts`` is the only additive
    field and collects discounts that could not be attached to an item.
    """

    store_name: str = ""
    store_location: str = ""
    purchase_date: str | None = None
    printed_item_count: int | None = None
    printed_total: Decimal | None = None
    total_discounts: Decimal = ZERO

    def is_set(self, field_name: str) -> bool:
        return not _is_absent(getattr(self, field_name))

    def merge_if_absent(self, field_name: str, value: object) -> bool:
        """Set ``field_name`` to ``value`` unless it already holds a value.

        Returns True when the field was filled by this call.
        """
        if field_name not in MERGEABLE_METADATA_FIELDS:
            raise ValueError(f"Not a mergeable metadata field: {field_name}")
        if self.is_set(field_name) or _is_absent(value):
            return False
        setattr(self, field_name, value)
        return True

    def merge(self, other: ReceiptMetadata) -> None:
        """Fold another image's metadata into this accumulator."""
        for field_name in MERGEABLE_METADATA_FIELDS:
            self.merge_if_absent(field_name, getattr(other, field_name))

    def add_unallocated_discount(self, amount: Decimal) -> None:
        self.total_discounts = round_money(self.total_discounts + amount)


@dataclass(frozen=True)
class Reconciliation:
    """Printed receipt totals compared with the totals computed from items."""

    printed_total: Decimal | None
    computed_total: Decimal
    total_delta: Decimal | None
    total_mismatch: bool
    printed_count: int | None
    computed_count: int
    count_delta: int | None
    count_mismatch: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "extracted_receipt_total": _optional_float(self.printed_total),
            "computed_items_total_excl_discounts": float(self.computed_total),
            "total_delta": _optional_float(self.total_delta),
            "total_mismatch": self.total_mismatch,
            "extracted_receipt_item_count": self.printed_count,
            "computed_items_count_excl_discounts": self.computed_count,
            "count_delta": self.count_delta,
            "count_mismatch": self.count_mismatch,
        }


@dataclass(frozen=True)
class ParseQuality:
    item_count: int
    table_item_count: int
    line_item_count: int
    rejected_line_count: int
    valid_price_ratio: float
    has_multipliers: bool
    has_extracted_total: bool
    has_extracted_item_count: bool
    confidence_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "itemCount": self.item_count,
            "tableItemCount": self.table_item_count,
            "lineItemCount": self.line_item_count,
            "rejectedLineCount": self.rejected_line_count,
            "validPriceRatio": round(self.valid_price_ratio, 2),
            "hasMultipliers": self.has_multipliers,
            "hasExtractedTotal": self.has_extracted_total,
            "hasExtractedItemCount": self.has_extracted_item_count,
            "confidenceScore": self.confidence_score,
        }


@dataclass(frozen=True)
class ParseResult:
    """Final output of one receipt parse."""

    items: list[ReceiptItem]
    metadata: ReceiptMetadata
    reconciliation: Reconciliation
    quality: ParseQuality
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON response contract."""
        return {
            "success": True,
            "items": [item.to_dict() for item in self.items],
            "extracted_store_name": self.metadata.store_name,
            "extracted_store_location": self.metadata.store_location,
            "extracted_purchase_date": self.metadata.purchase_date,
            "extracted_receipt_total": _optional_float(self.metadata.printed_total),
            "extracted_receipt_item_count": self.metadata.printed_item_count,
            "total_discounts": float(round_money(self.metadata.total_discounts)),
            "reconciliation": self.reconciliation.to_dict(),
            "parseQuality": self.quality.to_dict(),
        }


def _optional_float(value: Decimal | None) -> float | None:
    return None if value is None else float(value)
