"""
Pricing — turn a product plus size/add-on choices into a line price.

    from tillflow import pricing as P

    match P.parse_product(record):
        case Ok(latte):
            price = P.compute_line_price(latte, latte.default_size, [oat], quantity=2)

    selection = P.toggle_modifier(P.Selection(), extra_shot)   # add
    selection = P.toggle_modifier(selection, extra_shot)       # remove again
"""

from __future__ import annotations

from tillflow.pricing._types import (
    SIZE_CATEGORY,
    Modifier,
    Product,
    Selection,
    LinePrice,
    PricingErrorKind,
    PricingError,
    CatalogError,
)
from tillflow.pricing._resolve import (
    validate_selection,
    unit_price_of,
    compute_line_price,
    toggle_modifier,
)
from tillflow.pricing._catalog import parse_modifiers, parse_product

__all__ = (
    "SIZE_CATEGORY",
    "Modifier",
    "Product",
    "Selection",
    "LinePrice",
    "PricingErrorKind",
    "PricingError",
    "CatalogError",
    "validate_selection",
    "unit_price_of",
    "compute_line_price",
    "toggle_modifier",
    "parse_modifiers",
    "parse_product",
)
