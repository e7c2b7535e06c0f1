"""Core domain models for tillroll.

This module provides the data models used throughout the project:
- OcrBlock, BoundingBox: decoded document-analysis output
- ItemCandidate, ReceiptItem: tentative and finalized line items
- ReceiptMetadata, Reconciliation, ParseQuality, ParseResult: receipt-level results

Usage:
    from tillroll.domain import OcrBlock, ParseResult, ReceiptItem
"""

from tillroll.domain.receipt import (
    BlockType,
    BoundingBox,
    ItemCandidate,
    OcrBlock,
    ParseQuality,
    ParseResult,
    Provenance,
    ReceiptItem,
    ReceiptMetadata,
    Reconciliation,
    round_money,
)

__all__ = [
    "BlockType",
    "BoundingBox",
    "OcrBlock",
    "Provenance",
    "ItemCandidate",
    "ReceiptItem",
    "ReceiptMetadata",
    "Reconciliation",
    "ParseQuality",
    "ParseResult",
    "round_money",
]
