"""Runtime helpers for the receipt analysis pipeline (non-HTTP-server)."""

import json
import time
from pathlib import Path
from typing import Any

import httpx

from tillroll.domain.receipt import OcrBlock
from tillroll.receipt.ocr_blocks import resize_image_bytes, transform_analysis_result
from tillroll.runtime.logging import get_logger
from tillroll.runtime.paths import get_paths

logger = get_logger(__name__)

FETCH_TIMEOUT_SECONDS = 30.0
ANALYSIS_TIMEOUT_SECONDS = 60.0


class ImageFetchError(RuntimeError):
    """Raised when a receipt image cannot be downloaded."""


class AnalysisServiceUnavailable(RuntimeError):
    """Raised when the document-analysis service cannot be reached or returns an error."""


def fetch_image(url: str, client: httpx.Client) -> bytes:
    """Download one receipt image."""
    try:
        response = client.get(url, timeout=FETCH_TIMEOUT_SECONDS, follow_redirects=True)
    except httpx.RequestError as e:
        raise ImageFetchError(f"Failed to fetch image {url}: {e}") from e
    if response.status_code != 200:
        raise ImageFetchError(f"Failed to fetch image {url}: HTTP {response.status_code}")
    return response.content


def prepare_image(image_bytes: bytes) -> bytes:
    """Normalize orientation and size; undecodable bytes count as a failed image."""
    try:
        return resize_image_bytes(image_bytes)
    except OSError as e:
        raise ImageFetchError(f"Could not decode image: {e}") from e


def call_analysis_service(
    image_bytes: bytes,
    service_url: str,
    client: httpx.Client,
) -> tuple[dict[str, Any], list[OcrBlock]]:
    """
    Send one image to the document-analysis service with table detection.

    Returns:
        Tuple of (raw_result, blocks).
    """
    service_url = service_url.rstrip("/")
    logger.info("Sending image to analysis service at %s...", service_url)

    try:
        start_time = time.time()
        response = client.post(
            f"{service_url}/analyze",
            files={"file": ("receipt.jpg", image_bytes, "image/jpeg")},
            data={"feature_types": "TABLES"},
            timeout=ANALYSIS_TIMEOUT_SECONDS,
        )
        elapsed_time = time.time() - start_time
        logger.info("Analysis service returned in %.2f seconds", elapsed_time)
    except httpx.RequestError as e:
        logger.error("Failed to connect to analysis service: %s", e)
        raise AnalysisServiceUnavailable(f"Failed to connect to analysis service: {e}") from e

    if response.status_code != 200:
        logger.error("Analysis service error: %s", response.status_code)
        raise AnalysisServiceUnavailable(f"Analysis service error: {response.status_code}")

    try:
        raw_result = response.json()
    except ValueError as e:
        raise AnalysisServiceUnavailable(f"Analysis service returned invalid JSON: {e}") from e

    blocks = transform_analysis_result(raw_result)
    return raw_result if isinstance(raw_result, dict) else {}, blocks


def save_analysis_json(raw_result: dict[str, Any], name: str) -> Path:
    """Save a raw analysis response for debugging."""
    output_dir = get_paths().analysis_json
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{name}.json"
    output_path.write_text(json.dumps(raw_result, indent=2))
    logger.debug("Analysis JSON saved to: %s", output_path)
    return output_path
