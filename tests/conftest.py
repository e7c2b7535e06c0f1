"""Shared pytest fixtures for tillroll tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest

from tillroll.runtime import load_known_store_prefixes, reset_paths

AnalysisResponseBuilder = Callable[..., dict[str, Any]]


def _geometry(top: float) -> dict[str, Any]:
    return {"BoundingBox": {"Top": top, "Left": 0.05, "Height": 0.02, "Width": 0.9}}


def build_analysis_response(
    lines: Sequence[str] = (),
    rows: Sequence[Sequence[str]] = (),
    *,
    line_tops: Sequence[float] | None = None,
    row_tops: Sequence[float] | None = None,
) -> dict[str, Any]:
    """Build a document-analysis response with LINE blocks and one table.

    Each table cell gets one WORD child per whitespace-separated token.
    """
    blocks: list[dict[str, Any]] = []
    for i, text in enumerate(lines):
        top = line_tops[i] if line_tops is not None else 0.1 + i * 0.05
        blocks.append({"Id": f"line-{i}", "BlockType": "LINE", "Text": text, "Geometry": _geometry(top)})

    if rows:
        cell_ids: list[str] = []
        cells: list[dict[str, Any]] = []
        words: list[dict[str, Any]] = []
        for row_number, row in enumerate(rows, start=1):
            top = row_tops[row_number - 1] if row_tops is not None else 0.5 + row_number * 0.05
            for column_number, cell_text in enumerate(row, start=1):
                cell_id = f"cell-{row_number}-{column_number}"
                word_ids = []
                for word_number, word in enumerate(cell_text.split()):
                    word_id = f"{cell_id}-w{word_number}"
                    word_ids.append(word_id)
                    words.append({"Id": word_id, "BlockType": "WORD", "Text": word})
                cells.append(
                    {
                        "Id": cell_id,
                        "BlockType": "CELL",
                        "RowIndex": row_number,
                        "ColumnIndex": column_number,
                        "Geometry": _geometry(top),
                        "Relationships": [{"Type": "CHILD", "Ids": word_ids}] if word_ids else [],
                    }
                )
                cell_ids.append(cell_id)
        blocks.append({"Id": "table-0", "BlockType": "TABLE", "Relationships": [{"Type": "CHILD", "Ids": cell_ids}]})
        blocks.extend(cells)
        blocks.extend(words)

    return {"Blocks": blocks}


@pytest.fixture
def analysis_response() -> AnalysisResponseBuilder:
    return build_analysis_response


@pytest.fixture(autouse=True)
def _fresh_runtime_state() -> Iterator[None]:
    reset_paths()
    load_known_store_prefixes.cache_clear()
    yield
    reset_paths()
    load_known_store_prefixes.cache_clear()
