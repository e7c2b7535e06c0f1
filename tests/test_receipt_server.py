"""Tests for the HTTP parse endpoint."""

from __future__ import annotations

from decimal import Decimal

import pytest
from _pytest.monkeypatch import MonkeyPatch
from fastapi.testclient import TestClient

from tillroll.application.receipts import scan
from tillroll.receipt.ocr_result_parser import parse_receipt
from tillroll.runtime.receipt_server import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("body", [{}, {"imageUrls": []}, {"imageUrls": "https://img/1.jpg"}])
def test_parse_without_image_urls_is_bad_request(client: TestClient, body: dict) -> None:
    response = client.post("/parse", json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No image URLs provided"}


def test_parse_passes_hints_and_returns_result(client: TestClient, monkeypatch: MonkeyPatch) -> None:
    captured: list[scan.ReceiptParseRequest] = []

    def fake_run(request: scan.ReceiptParseRequest) -> scan.ReceiptParseOutcome:
        captured.append(request)
        return scan.ReceiptParseOutcome(status="parsed", result=parse_receipt([], store_name_hint="Tesco"))

    monkeypatch.setattr(scan, "run_receipt_parse", fake_run)

    response = client.post(
        "/parse",
        json={"imageUrls": ["https://img/1.jpg"], "storeName": "Tesco", "totalAmount": 12.4},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["extracted_store_name"] == "Tesco"
    assert payload["parseQuality"]["itemCount"] == 0
    assert captured == [
        scan.ReceiptParseRequest(
            image_urls=["https://img/1.jpg"],
            store_name_hint="Tesco",
            total_amount_hint=Decimal("12.4"),
        )
    ]


def test_parse_analysis_failure_is_server_error(client: TestClient, monkeypatch: MonkeyPatch) -> None:
    def fake_run(request: scan.ReceiptParseRequest) -> scan.ReceiptParseOutcome:
        return scan.ReceiptParseOutcome(status="analysis_unavailable", error="Analysis service error: 503")

    monkeypatch.setattr(scan, "run_receipt_parse", fake_run)

    response = client.post("/parse", json={"imageUrls": ["https://img/1.jpg"]})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Analysis service error: 503"}


def test_parse_ignores_unparseable_total(client: TestClient, monkeypatch: MonkeyPatch) -> None:
    captured: list[scan.ReceiptParseRequest] = []

    def fake_run(request: scan.ReceiptParseRequest) -> scan.ReceiptParseOutcome:
        captured.append(request)
        return scan.ReceiptParseOutcome(status="parsed", result=parse_receipt([]))

    monkeypatch.setattr(scan, "run_receipt_parse", fake_run)

    response = client.post("/parse", json={"imageUrls": ["https://img/1.jpg"], "totalAmount": "about a tenner"})

    assert response.status_code == 200
    assert captured[0].total_amount_hint is None


@pytest.mark.parametrize("total", ["Infinity", "NaN", "-inf"])
def test_parse_ignores_non_finite_total(client: TestClient, monkeypatch: MonkeyPatch, total: str) -> None:
    captured: list[scan.ReceiptParseRequest] = []

    def fake_run(request: scan.ReceiptParseRequest) -> scan.ReceiptParseOutcome:
        captured.append(request)
        return scan.ReceiptParseOutcome(status="parsed", result=parse_receipt([]))

    monkeypatch.setattr(scan, "run_receipt_parse", fake_run)

    response = client.post("/parse", json={"imageUrls": ["https://img/1.jpg"], "totalAmount": total})

    assert response.status_code == 200
    assert captured[0].total_amount_hint is None
