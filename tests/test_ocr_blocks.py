"""Tests for decoding document-analysis responses and image preparation."""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any

import pytest
from PIL import Image

from tillroll.domain.receipt import BlockType
from tillroll.receipt.ocr_blocks import BlockIndex, parse_block, resize_image_bytes, transform_analysis_result


def _png_bytes(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(255, 255, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_transform_decodes_lines_cells_and_words(analysis_response: Callable[..., dict[str, Any]]) -> None:
    raw = analysis_response(lines=["TESCO"], rows=[["Bananas", "1.20"]])

    blocks = transform_analysis_result(raw)
    index = BlockIndex(blocks)

    assert [line.text for line in index.text_lines()] == ["TESCO"]
    assert len(index.of_type(BlockType.TABLE)) == 1
    cells = index.of_type(BlockType.CELL)
    assert [(cell.row_index, cell.column_index) for cell in cells] == [(1, 1), (1, 2)]
    assert [index.cell_text(cell) for cell in cells] == ["Bananas", "1.20"]
    assert cells[0].geometry is not None
    assert cells[0].geometry.top == pytest.approx(0.55)


def test_cell_text_joins_multiple_words(analysis_response: Callable[..., dict[str, Any]]) -> None:
    index = BlockIndex(transform_analysis_result(analysis_response(rows=[["Whole Milk 2L", "1.45"]])))

    first_cell = index.of_type(BlockType.CELL)[0]

    assert index.cell_text(first_cell) == "Whole Milk 2L"


def test_transform_without_blocks_is_empty_page() -> None:
    assert transform_analysis_result({}) == []
    assert transform_analysis_result({"Blocks": None}) == []
    assert transform_analysis_result(None) == []


def test_malformed_blocks_are_dropped() -> None:
    raw = {
        "Blocks": [
            "not a block",
            {"Id": "x", "BlockType": "KEY_VALUE_SET"},
            {"Id": "ok", "BlockType": "LINE", "Text": "Milk 1.20", "Geometry": {"BoundingBox": {"Top": "bad"}}},
        ]
    }

    blocks = transform_analysis_result(raw)

    assert [block.id for block in blocks] == ["ok"]
    assert blocks[0].geometry is None


def test_parse_block_only_follows_child_relationships() -> None:
    block = parse_block(
        {
            "Id": "c1",
            "BlockType": "CELL",
            "RowIndex": "2",
            "ColumnIndex": 1,
            "Relationships": [{"Type": "MERGED_CELL", "Ids": ["m1"]}, {"Type": "CHILD", "Ids": ["w1", "w2"]}],
        }
    )

    assert block is not None
    assert block.row_index == 2
    assert block.child_ids == ("w1", "w2")


def test_text_lines_skip_empty_lines() -> None:
    blocks = transform_analysis_result(
        {"Blocks": [{"Id": "a", "BlockType": "LINE", "Text": ""}, {"Id": "b", "BlockType": "LINE", "Text": "Eggs 2.10"}]}
    )

    assert [line.id for line in BlockIndex(blocks).text_lines()] == ["b"]


def test_resize_image_bytes_caps_longest_side() -> None:
    resized = resize_image_bytes(_png_bytes(400, 200), max_dimension=100)

    with Image.open(io.BytesIO(resized)) as img:
        assert img.format == "JPEG"
        assert img.size == (100, 50)


def test_resize_image_bytes_keeps_small_images() -> None:
    resized = resize_image_bytes(_png_bytes(80, 120), max_dimension=200)

    with Image.open(io.BytesIO(resized)) as img:
        assert img.size == (80, 120)
