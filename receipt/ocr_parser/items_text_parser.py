"""Text-line based receipt item extraction."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from tillroll.domain.receipt import ItemCandidate, OcrBlock, Provenance, round_money

from .common import (
    DEFAULT_STORE_PREFIXES,
    FULL_MULTIPLIER,
    MAX_ITEM_PRICE,
    PRICE_ONLY,
    QUANTITY_ONLY,
    TIMESTAMP,
    TRAILING_PRICE,
    LineClass,
    classify_line_name,
    is_discount_candidate,
    strip_product_codes,
    strip_tax_marker,
)
from .prices import normalize_price


# Pending multiplier states. A "3 x 1.50" line goes straight to
# MultiplierReady; "3 x" waits in AwaitingPrice for a lone "1.50" line.
@dataclass(frozen=True)
class NoMultiplier:
    pass


@dataclass(frozen=True)
class AwaitingPrice:
    quantity: int


@dataclass(frozen=True)
class MultiplierReady:
    quantity: int
    unit_price: Decimal


MultiplierState = NoMultiplier | AwaitingPrice | MultiplierReady

NO_MULTIPLIER = NoMultiplier()


@dataclass
class LineExtraction:
    """Candidates from one image's body lines plus parse diagnostics."""

    items: list[ItemCandidate] = field(default_factory=list)
    rejected_count: int = 0
    warnings: list[str] = field(default_factory=list)


def _match_multiplier(text: str, state: MultiplierState) -> MultiplierState | None:
    """Return the next state if ``text`` is a multiplier fragment, else None."""
    full = FULL_MULTIPLIER.match(text)
    if full:
        return MultiplierReady(quantity=int(full.group(1)), unit_price=normalize_price(full.group(2)))
    quantity_only = QUANTITY_ONLY.match(text)
    if quantity_only:
        return AwaitingPrice(quantity=int(quantity_only.group(1)))
    if isinstance(state, AwaitingPrice):
        price_only = PRICE_ONLY.match(text)
        if price_only:
            return MultiplierReady(quantity=state.quantity, unit_price=normalize_price(price_only.group(1)))
    return None


def _clean_item_name(text: str, price_start: int) -> str:
    """Item name is whatever precedes the trailing price, minus codes and tax letters."""
    return strip_tax_marker(strip_product_codes(text[:price_start]))


def extract_line_items(
    lines: Sequence[OcrBlock],
    store_prefixes: Iterable[str] = DEFAULT_STORE_PREFIXES,
) -> LineExtraction:
    """
    Extract item candidates from free-text body lines.

    Single forward scan. The only carried state is the pending multiplier,
    which applies to the next priced item line and is cleared after that line
    or after any line that is not an item.

    Args:
        lines: Body LINE blocks of one image, in reading order
        store_prefixes: Store-identity tokens; lines starting with one are rejected
    """
    result = LineExtraction()
    store_prefixes = tuple(store_prefixes)
    state: MultiplierState = NO_MULTIPLIER

    for line in lines:
        text = (line.text or "").strip()
        if len(text) < 2:
            continue
        if TIMESTAMP.match(text):
            continue

        next_state = _match_multiplier(text, state)
        if next_state is not None:
            state = next_state
            continue

        price_match = TRAILING_PRICE.search(text)
        if not price_match:
            if isinstance(state, MultiplierReady):
                result.warnings.append(f'multiplier {state.quantity} x {state.unit_price} dropped before "{text}"')
            state = NO_MULTIPLIER
            continue

        total_price = normalize_price(price_match.group(1))
        if total_price == 0 or abs(total_price) > MAX_ITEM_PRICE:
            state = NO_MULTIPLIER
            continue

        name = _clean_item_name(text, price_match.start())
        if len(name) < 2:
            state = NO_MULTIPLIER
            continue

        line_class = classify_line_name(name, store_prefixes)
        if line_class in (LineClass.NON_ITEM, LineClass.STORE_IDENTITY):
            result.rejected_count += 1
            state = NO_MULTIPLIER
            continue

        quantity = 1
        unit_price = total_price
        if isinstance(state, MultiplierReady) and state.unit_price and state.quantity >= 1:
            quantity = state.quantity
            unit_price = state.unit_price
            total_price = round_money(quantity * unit_price)

        result.items.append(
            ItemCandidate(
                name=name,
                quantity=quantity,
                unit_price=round_money(unit_price),
                total_price=round_money(total_price),
                provenance=Provenance.LINE,
                geometry=line.geometry,
                is_discount_candidate=is_discount_candidate(name, total_price),
            )
        )
        state = NO_MULTIPLIER

    return result
