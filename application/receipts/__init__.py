"""Receipt workflows."""

from tillroll.application.receipts.record import build_receipt_update, needs_manual_review
from tillroll.application.receipts.scan import ReceiptParseOutcome, ReceiptParseRequest, run_receipt_parse

__all__ = [
    "ReceiptParseRequest",
    "ReceiptParseOutcome",
    "run_receipt_parse",
    "build_receipt_update",
    "needs_manual_review",
]
