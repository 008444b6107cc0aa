"""
Modifier pricing resolver — pure functions, no side effects.

    unit_price = base_price + size.price_delta + Σ add-on price_delta
    line_total = unit_price × quantity

Accumulation is exact Decimal arithmetic; nothing is rounded here.
"""

from __future__ import annotations

from collections.abc import Iterable

from kungfu import Result, Ok, Error

from tillflow._types import Money, ZERO
from tillflow.pricing._types import (
    Modifier,
    Product,
    Selection,
    LinePrice,
    PricingError,
    PricingErrorKind,
)

# ═══════════════════════════════════════════════════════════════════════════════
# validate_selection() — Input Constraints
# ═══════════════════════════════════════════════════════════════════════════════


def validate_selection(
    product: Product,
    size: Modifier | None,
    modifiers: Iterable[Modifier],
) -> Result[Selection, PricingError]:
    """
    Check a size/add-on choice against the product's options.

    Returned Selection holds the product's own Modifier objects, so a
    stale or hand-built modifier cannot smuggle in a different delta.
    """
    addons = tuple(modifiers)

    if (size is not None or addons) and not product.allows_modifications:
        return Error(PricingError(
            PricingErrorKind.MODIFICATIONS_DISABLED,
            f"{product.name} does not accept modifications",
        ))

    resolved_size: Modifier | None = None
    if size is not None:
        if not size.is_size:
            return Error(PricingError(
                PricingErrorKind.NOT_A_SIZE,
                f"{size.name} is not a size option",
                size.id,
            ))
        resolved_size = product.option(size.id)
        if resolved_size is None or not resolved_size.is_size:
            return Error(PricingError(
                PricingErrorKind.UNKNOWN_OPTION,
                f"{product.name} has no size {size.name}",
                size.id,
            ))

    seen: set[str] = set()
    resolved: list[Modifier] = []
    for m in addons:
        if m.is_size:
            return Error(PricingError(
                PricingErrorKind.SIZE_AS_ADDON,
                f"{m.name} is a size and cannot be added as an add-on",
                m.id,
            ))
        if m.id in seen:
            return Error(PricingError(
                PricingErrorKind.DUPLICATE_MODIFIER,
                f"{m.name} selected more than once",
                m.id,
            ))
        option = product.option(m.id)
        if option is None or option.is_size:
            return Error(PricingError(
                PricingErrorKind.UNKNOWN_OPTION,
                f"{product.name} has no option {m.name}",
                m.id,
            ))
        seen.add(m.id)
        resolved.append(option)

    return Ok(Selection(size=resolved_size, modifiers=tuple(resolved)))


# ═══════════════════════════════════════════════════════════════════════════════
# compute_line_price() — Primary Contract
# ═══════════════════════════════════════════════════════════════════════════════


def unit_price_of(product: Product, selection: Selection) -> Money:
    size_delta = selection.size.price_delta if selection.size else ZERO
    return product.base_price + size_delta + sum(
        (m.price_delta for m in selection.modifiers), ZERO
    )


def compute_line_price(
    product: Product,
    size: Modifier | None,
    modifiers: Iterable[Modifier],
    quantity: int,
) -> Result[LinePrice, PricingError]:
    """
    Price one cart line.

    Example:
        latte = Product("1", "Latte", Decimal("4.00"), options)
        match compute_line_price(latte, large, [oat, extra_shot], 2):
            case Ok(price):
                price.unit_price, price.line_total
            case Error(e):
                e.kind, e.message
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        return Error(PricingError(
            PricingErrorKind.INVALID_QUANTITY,
            f"Quantity must be a whole number of at least 1, got {quantity!r}",
        ))

    match validate_selection(product, size, modifiers):
        case Ok(selection):
            unit = unit_price_of(product, selection)
            return Ok(LinePrice(unit_price=unit, line_total=unit * quantity))
        case Error(e):
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# toggle_modifier() — Symmetric Selection Edit
# ═══════════════════════════════════════════════════════════════════════════════


def toggle_modifier(selection: Selection, modifier: Modifier) -> Selection:
    """
    Select `modifier` if absent, remove it if present (matched by id).

    Toggling the same id twice restores the starting selection.
    A size toggle replaces the active size; toggling the active size clears it.
    """
    if modifier.is_size:
        if selection.size is not None and selection.size.id == modifier.id:
            return Selection(size=None, modifiers=selection.modifiers)
        return Selection(size=modifier, modifiers=selection.modifiers)

    if any(m.id == modifier.id for m in selection.modifiers):
        return Selection(
            size=selection.size,
            modifiers=tuple(m for m in selection.modifiers if m.id != modifier.id),
        )
    return Selection(size=selection.size, modifiers=(*selection.modifiers, modifier))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "validate_selection",
    "unit_price_of",
    "compute_line_price",
    "toggle_modifier",
)
