"""Split an image's text lines into header, body and footer regions."""

from collections.abc import Sequence
from dataclasses import dataclass

from tillroll.domain.receipt import OcrBlock

from .common import FOOTER_KEYWORDS

HEADER_LINE_COUNT = 5


@dataclass(frozen=True)
class ReceiptSections:
    """Views over one image's LINE blocks.

    ``header`` overlaps ``body``: it is simply the first few lines, where the
    store name and address are printed.
    """

    header: list[OcrBlock]
    body: list[OcrBlock]
    footer: list[OcrBlock]

    @property
    def lines(self) -> list[OcrBlock]:
        return self.body + self.footer


def find_footer_start(lines: Sequence[OcrBlock]) -> int:
    """Return the index of the first footer line, or len(lines) if none."""
    for i, line in enumerate(lines):
        if FOOTER_KEYWORDS.search((line.text or "").lower()):
            return i
    return len(lines)


def sectionize(lines: Sequence[OcrBlock]) -> ReceiptSections:
    footer_start = find_footer_start(lines)
    return ReceiptSections(
        header=list(lines[:HEADER_LINE_COUNT]),
        body=list(lines[:footer_start]),
        footer=list(lines[footer_start:]),
    )
