"""Composable OCR receipt parser components."""

from .fields_parser import extract_metadata
from .items_table_parser import extract_table_items
from .items_text_parser import LineExtraction, extract_line_items
from .prices import normalize_price
from .sections import ReceiptSections, sectionize

__all__ = [
    "LineExtraction",
    "ReceiptSections",
    "extract_line_items",
    "extract_metadata",
    "extract_table_items",
    "normalize_price",
    "sectionize",
]
