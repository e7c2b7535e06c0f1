"""End-to-end tests for parsing all images of one receipt."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from tillroll.receipt.ocr_blocks import transform_analysis_result
from tillroll.receipt.ocr_result_parser import parse_receipt


def test_two_image_receipt_reconciles_table_item_with_footer_total(
    analysis_response: Callable[..., dict[str, Any]],
) -> None:
    first = transform_analysis_result(analysis_response(rows=[["Bananas", "1.20"]]))
    second = transform_analysis_result(analysis_response(lines=["Total: £1.20", "1 items"]))

    result = parse_receipt([first, second])

    assert [(item.name, item.total_price) for item in result.items] == [("Bananas", Decimal("1.20"))]
    assert result.metadata.printed_total == Decimal("1.20")
    assert result.metadata.printed_item_count == 1

    reconciliation = result.reconciliation
    assert reconciliation.computed_total == Decimal("1.20")
    assert reconciliation.computed_count == 1
    assert reconciliation.total_mismatch is False
    assert reconciliation.count_mismatch is False

    quality = result.quality
    assert quality.table_item_count == 1
    assert quality.line_item_count == 0
    assert quality.has_extracted_total is True
    assert quality.has_extracted_item_count is True
    # one item (5) + all prices valid (20) + table source (10) + printed total (10)
    assert quality.confidence_score == 45


def test_table_and_line_detections_of_same_item_are_merged(
    analysis_response: Callable[..., dict[str, Any]],
) -> None:
    page = transform_analysis_result(
        analysis_response(
            lines=["TESCO", "Bread 1.10", "Eggs 2.10", "TOTAL 3.20"],
            rows=[["Bread", "1.10"]],
            line_tops=[0.05, 0.30, 0.35, 0.80],
            row_tops=[0.30],
        )
    )

    result = parse_receipt([page])

    assert [item.name for item in result.items] == ["Bread", "Eggs"]
    assert result.quality.table_item_count == 1
    assert result.quality.line_item_count == 2
    assert result.reconciliation.total_mismatch is False
    assert result.metadata.store_name == "TESCO"


def test_first_image_wins_for_receipt_fields(analysis_response: Callable[..., dict[str, Any]]) -> None:
    first = transform_analysis_result(analysis_response(lines=["ASDA", "Milk 1.20", "TOTAL 1.20"]))
    second = transform_analysis_result(analysis_response(lines=["LIDL", "Peas 0.80", "TOTAL 9.99"]))

    result = parse_receipt([first, second])

    assert result.metadata.store_name == "ASDA"
    assert result.metadata.printed_total == Decimal("1.20")
    assert [item.name for item in result.items] == ["Milk", "Peas"]
    assert result.reconciliation.total_mismatch is True


def test_empty_pages_are_warned_and_skipped(analysis_response: Callable[..., dict[str, Any]]) -> None:
    page = transform_analysis_result(analysis_response(lines=["Milk 1.20"]))

    result = parse_receipt([[], page, None])

    assert [item.name for item in result.items] == ["Milk"]
    assert result.warnings == ["image 1: no analysis data", "image 3: no analysis data"]


def test_hints_only_fill_fields_ocr_left_empty(analysis_response: Callable[..., dict[str, Any]]) -> None:
    page = transform_analysis_result(analysis_response(lines=["12", "34", "GBP", "56", "78", "Milk 1.20"]))

    result = parse_receipt([page], store_name_hint="Corner Shop", total_amount_hint=1.2)

    assert result.metadata.store_name == "Corner Shop"
    assert result.metadata.printed_total == Decimal("1.20")
    assert result.quality.has_extracted_total is False
    assert result.reconciliation.total_mismatch is False


def test_unknown_store_hint_is_ignored(analysis_response: Callable[..., dict[str, Any]]) -> None:
    page = transform_analysis_result(analysis_response(lines=["12", "34", "GBP", "56", "78", "Milk 1.20"]))

    result = parse_receipt([page], store_name_hint="Unknown Store")

    assert result.metadata.store_name == ""


def test_unallocated_discount_is_reported_in_total_discounts(
    analysis_response: Callable[..., dict[str, Any]],
) -> None:
    page = transform_analysis_result(analysis_response(rows=[["Coupon discount", "-1.00"], ["Cheese", "3.00"]]))

    result = parse_receipt([page])

    assert [item.name for item in result.items] == ["Cheese"]
    assert result.metadata.total_discounts == Decimal("1.00")
    assert result.to_dict()["total_discounts"] == 1.0


def test_no_pages_gives_empty_result() -> None:
    result = parse_receipt([])

    assert result.items == []
    assert result.quality.confidence_score == 0
    assert result.to_dict()["success"] is True


def test_to_dict_matches_response_contract(analysis_response: Callable[..., dict[str, Any]]) -> None:
    page = transform_analysis_result(analysis_response(lines=["Milk 1.20", "TOTAL 1.20", "1 items"]))

    payload = parse_receipt([page]).to_dict()

    assert set(payload) == {
        "success",
        "items",
        "extracted_store_name",
        "extracted_store_location",
        "extracted_purchase_date",
        "extracted_receipt_total",
        "extracted_receipt_item_count",
        "total_discounts",
        "reconciliation",
        "parseQuality",
    }
    assert payload["items"] == [
        {
            "name": "Milk",
            "quantity": 1,
            "unit_price": 1.2,
            "total_price": 1.2,
            "discount_applied": 0.0,
            "offer_description": "",
            "category": "other",
        }
    ]
    assert payload["reconciliation"]["extracted_receipt_total"] == 1.2
    assert payload["reconciliation"]["computed_items_count_excl_discounts"] == 1
    assert payload["parseQuality"]["lineItemCount"] == 1


@pytest.mark.parametrize("hint", [Decimal("Infinity"), Decimal("NaN"), float("inf"), float("nan"), Decimal("1e500")])
def test_unusable_total_hint_is_ignored(hint: Decimal | float) -> None:
    result = parse_receipt([], total_amount_hint=hint)

    assert result.metadata.printed_total is None
    assert result.reconciliation.total_mismatch is False
