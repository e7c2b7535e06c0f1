"""Receipt parse workflow orchestration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

import httpx

from tillroll.receipt.ocr_result_parser import parse_receipt
from tillroll.runtime import get_logger, get_paths, load_known_store_prefixes
from tillroll.runtime.receipt_pipeline import (
    AnalysisServiceUnavailable,
    ImageFetchError,
    call_analysis_service,
    fetch_image,
    prepare_image,
    save_analysis_json,
)

if TYPE_CHECKING:
    from tillroll.domain.receipt import OcrBlock, ParseResult

logger = get_logger(__name__)

ParseStatus = Literal[
    "no_images",
    "analysis_unavailable",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptParseRequest:
    """Inputs for running the receipt parse workflow."""

    image_urls: Sequence[str]
    store_name_hint: str | None = None
    total_amount_hint: Decimal | float | None = None
    service_url: str | None = None
    save_debug_json: bool = False


@dataclass(frozen=True)
class ReceiptParseOutcome:
    """Outcome from the receipt parse workflow."""

    status: ParseStatus
    result: ParseResult | None = None
    error: str | None = None
    skipped_images: tuple[str, ...] = ()


def run_receipt_parse(request: ReceiptParseRequest, client: httpx.Client | None = None) -> ReceiptParseOutcome:
    """Run parse flow: fetch each image -> analyse -> parse all pages together.

    Images are processed strictly in request order. An image that cannot be
    fetched or decoded is skipped; an analysis-service failure aborts the
    whole invocation with no partial result.
    """
    if not request.image_urls:
        return ReceiptParseOutcome(status="no_images", error="No image URLs provided")

    service_url = request.service_url or get_paths().analysis_service_url
    owns_client = client is None
    http = client if client is not None else httpx.Client()

    pages: list[list[OcrBlock]] = []
    skipped: list[str] = []
    try:
        for image_number, url in enumerate(request.image_urls, start=1):
            try:
                image_bytes = prepare_image(fetch_image(url, http))
            except ImageFetchError as exc:
                logger.warning("Skipping image %d: %s", image_number, exc)
                skipped.append(url)
                continue

            raw_result, blocks = call_analysis_service(image_bytes, service_url, http)
            if request.save_debug_json:
                try:
                    save_analysis_json(raw_result, f"image_{image_number}")
                except OSError as exc:
                    logger.warning("Could not save analysis JSON for image %d: %s", image_number, exc)
            if not blocks:
                logger.warning("Image %d returned no analysis blocks", image_number)
            pages.append(blocks)
    except AnalysisServiceUnavailable as exc:
        return ReceiptParseOutcome(
            status="analysis_unavailable",
            error=str(exc),
            skipped_images=tuple(skipped),
        )
    finally:
        if owns_client:
            http.close()

    result = parse_receipt(
        pages,
        store_name_hint=request.store_name_hint,
        total_amount_hint=request.total_amount_hint,
        known_stores=load_known_store_prefixes(),
    )
    for warning in result.warnings:
        logger.info("Parse warning: %s", warning)
    logger.info(
        "Parsed %d items from %d image(s), confidence %d",
        len(result.items),
        len(pages),
        result.quality.confidence_score,
    )
    return ReceiptParseOutcome(status="parsed", result=result, skipped_images=tuple(skipped))
