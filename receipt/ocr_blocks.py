"""Pure helpers for turning document-analysis output into OcrBlocks."""

from __future__ import annotations

import io
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from tillroll.domain.receipt import BlockType, BoundingBox, OcrBlock

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this


def resize_image_bytes(image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION) -> bytes:
    """
    Resize image bytes if it exceeds max_dimension on either side.

    EXIF orientation is applied first so the analysis service sees the
    receipt upright.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)

    Returns:
        Image bytes (JPEG format), resized if necessary
    """
    from PIL import Image, ImageOps

    img = Image.open(io.BytesIO(image_bytes))
    img = ImageOps.exif_transpose(img)

    width, height = img.size

    if width <= max_dimension and height <= max_dimension:
        img_final = img
    else:
        if width > height:
            new_width = max_dimension
            new_height = int(height * (max_dimension / width))
        else:
            new_height = max_dimension
            new_width = int(width * (max_dimension / height))

        img_final = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img_final.convert("RGB").save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _parse_geometry(raw: Any) -> BoundingBox | None:
    if not isinstance(raw, Mapping):
        return None
    bbox = raw.get("BoundingBox")
    if not isinstance(bbox, Mapping):
        return None
    try:
        return BoundingBox(
            top=float(bbox.get("Top", 0.0)),
            left=float(bbox.get("Left", 0.0)),
            height=float(bbox.get("Height", 0.0)),
            width=float(bbox.get("Width", 0.0)),
        )
    except (TypeError, ValueError):
        return None


def _child_ids(relationships: Any) -> tuple[str, ...]:
    """Ids from the CHILD relationship only (cells -> words)."""
    if not isinstance(relationships, list):
        return ()
    for relationship in relationships:
        if isinstance(relationship, Mapping) and relationship.get("Type") == "CHILD":
            ids = relationship.get("Ids") or []
            return tuple(str(block_id) for block_id in ids)
    return ()


def _optional_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_block(raw: Any) -> OcrBlock | None:
    """Decode one service block; returns None for malformed entries."""
    if not isinstance(raw, Mapping):
        return None
    try:
        block_type = BlockType(raw.get("BlockType"))
    except ValueError:
        return None
    text = raw.get("Text")
    return OcrBlock(
        id=str(raw.get("Id", "")),
        block_type=block_type,
        text=text if isinstance(text, str) else None,
        geometry=_parse_geometry(raw.get("Geometry")),
        row_index=_optional_int(raw.get("RowIndex")),
        column_index=_optional_int(raw.get("ColumnIndex")),
        child_ids=_child_ids(raw.get("Relationships")),
    )


def transform_analysis_result(raw_result: Any) -> list[OcrBlock]:
    """
    Convert a raw analysis response into ordered OcrBlocks.

    A response without a ``Blocks`` list is treated as "no data" and yields
    an empty page; malformed or unsupported blocks are dropped.
    """
    if not isinstance(raw_result, Mapping):
        return []
    raw_blocks = raw_result.get("Blocks")
    if not isinstance(raw_blocks, list):
        return []
    blocks: list[OcrBlock] = []
    for raw in raw_blocks:
        block = parse_block(raw)
        if block is not None:
            blocks.append(block)
    return blocks


class BlockIndex:
    """Lookup of one page's blocks by id and type."""

    def __init__(self, blocks: Iterable[OcrBlock]) -> None:
        self.blocks: list[OcrBlock] = list(blocks)
        self._by_id: dict[str, OcrBlock] = {block.id: block for block in self.blocks}
        self._by_type: dict[BlockType, list[OcrBlock]] = defaultdict(list)
        for block in self.blocks:
            self._by_type[block.block_type].append(block)

    def get(self, block_id: str) -> OcrBlock | None:
        return self._by_id.get(block_id)

    def of_type(self, block_type: BlockType) -> list[OcrBlock]:
        return list(self._by_type.get(block_type, ()))

    def text_lines(self) -> list[OcrBlock]:
        """LINE blocks that carry text, in service order."""
        return [block for block in self.of_type(BlockType.LINE) if block.text]

    def cell_text(self, cell: OcrBlock) -> str:
        """Reconstruct a cell's text from its child word blocks."""
        words: list[str] = []
        for child_id in cell.child_ids:
            child = self.get(child_id)
            words.append((child.text or "") if child is not None else "")
        return " ".join(words).strip()
