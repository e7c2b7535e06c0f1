"""FastAPI server that parses receipt images into structured line items."""

import os
from decimal import Decimal, InvalidOperation
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from tillroll.application.receipts import scan
from tillroll.runtime import get_logger

logger = get_logger(__name__)

app = FastAPI(title="Receipt Parser")


def _total_hint(value: Any) -> Decimal | None:
    if value in (None, ""):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning("Ignoring unusable totalAmount: %r", value)
        return None
    return amount


@app.post("/parse")
async def parse_receipt_images(request: Request) -> JSONResponse:
    """Fetch, analyse and parse every image of one receipt."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    image_urls = body.get("imageUrls") or []
    if not isinstance(image_urls, list) or not image_urls:
        return JSONResponse({"success": False, "error": "No image URLs provided"}, status_code=400)

    store_name = body.get("storeName") or None
    parse_request = scan.ReceiptParseRequest(
        image_urls=[str(url) for url in image_urls],
        store_name_hint=str(store_name) if store_name else None,
        total_amount_hint=_total_hint(body.get("totalAmount")),
    )
    logger.info("Processing %d image(s) for store: %s", len(image_urls), store_name or "unknown")

    # The workflow uses a blocking HTTP client.
    outcome = await run_in_threadpool(scan.run_receipt_parse, parse_request)

    if outcome.status == "no_images":
        return JSONResponse({"success": False, "error": outcome.error}, status_code=400)
    if outcome.status != "parsed" or outcome.result is None:
        logger.error("Receipt parse failed: %s", outcome.error)
        return JSONResponse({"success": False, "error": outcome.error or "Receipt processing failed"}, status_code=500)

    return JSONResponse(outcome.result.to_dict())


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
