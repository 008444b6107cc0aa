"""
Cart line — one priced, quantity-bearing entry.

unit_price and line_total are derived by the pricing resolver and never set
directly: lines are immutable and every edit builds a new one.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final

from kungfu import Result, Ok, Error

from tillflow._types import Money
from tillflow.pricing import Modifier, Product, PricingError, compute_line_price

MAX_INSTRUCTIONS = 200

# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    PRICING = auto()
    INSTRUCTIONS_TOO_LONG = auto()
    NO_SUCH_LINE = auto()


@dataclass(frozen=True, slots=True)
class CartError:
    kind: CartErrorKind
    message: str
    pricing: PricingError | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# CartLine
# ═══════════════════════════════════════════════════════════════════════════════


class _Keep(Enum):
    KEEP = auto()


KEEP: Final = _Keep.KEEP
"""Patch sentinel: leave the field as it is."""


@dataclass(frozen=True, slots=True)
class LinePatch:
    """
    Replacement values for an existing line.

    Example:
        LinePatch(quantity=3)                     # only quantity
        LinePatch(size=large, modifiers=(oat,))   # new size + add-ons
        LinePatch(size=None)                      # drop the size
    """

    size: Modifier | None | _Keep = KEEP
    modifiers: tuple[Modifier, ...] | _Keep = KEEP
    quantity: int | _Keep = KEEP
    special_instructions: str | None | _Keep = KEEP


@dataclass(frozen=True, slots=True)
class CartLine:
    product: Product
    quantity: int
    selected_size: Modifier | None
    selected_modifiers: tuple[Modifier, ...]
    special_instructions: str | None
    unit_price: Money
    line_total: Money

    @property
    def modifications(self) -> tuple[Modifier, ...]:
        """Size first, then add-ons, as shown on tickets."""
        if self.selected_size is None:
            return self.selected_modifiers
        return (self.selected_size, *self.selected_modifiers)

    def with_changes(self, patch: LinePatch) -> Result[CartLine, CartError]:
        """Apply patch and re-price against this line's product snapshot."""
        return make_line(
            self.product,
            quantity=self.quantity if patch.quantity is KEEP else patch.quantity,
            size=self.selected_size if patch.size is KEEP else patch.size,
            modifiers=self.selected_modifiers if patch.modifiers is KEEP else patch.modifiers,
            special_instructions=(
                self.special_instructions
                if patch.special_instructions is KEEP
                else patch.special_instructions
            ),
        )


def _clean_instructions(text: str | None) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text or None


def make_line(
    product: Product,
    quantity: int = 1,
    size: Modifier | None = None,
    modifiers: Iterable[Modifier] = (),
    special_instructions: str | None = None,
) -> Result[CartLine, CartError]:
    """Price and build a cart line."""
    instructions = _clean_instructions(special_instructions)
    if instructions is not None and len(instructions) > MAX_INSTRUCTIONS:
        return Error(CartError(
            CartErrorKind.INSTRUCTIONS_TOO_LONG,
            f"Special instructions are limited to {MAX_INSTRUCTIONS} characters",
        ))

    modifiers = tuple(modifiers)
    match compute_line_price(product, size, modifiers, quantity):
        case Ok(price):
            return Ok(CartLine(
                product=product,
                quantity=quantity,
                selected_size=product.option(size.id) if size is not None else None,
                selected_modifiers=tuple(product.option(m.id) or m for m in modifiers),
                special_instructions=instructions,
                unit_price=price.unit_price,
                line_total=price.line_total,
            ))
        case Error(e):
            return Error(CartError(CartErrorKind.PRICING, e.message, e))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "MAX_INSTRUCTIONS",
    "CartErrorKind",
    "CartError",
    "KEEP",
    "LinePatch",
    "CartLine",
    "make_line",
)
