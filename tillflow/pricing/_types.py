"""
Pricing types — modifiers, product snapshots, line prices.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tillflow._types import Money, ZERO, format_money

SIZE_CATEGORY = "size"

# ═══════════════════════════════════════════════════════════════════════════════
# Modifier — Closed Tagged Structure
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Modifier:
    """
    A named price adjustment offered by a product.

    Note: `category == "size"` is the mutually-exclusive variant.
    Call sites ask `is_size` instead of comparing strings.
    """

    id: str
    name: str
    category: str
    price_delta: Money = ZERO

    @property
    def is_size(self) -> bool:
        return self.category == SIZE_CATEGORY

    @property
    def is_free(self) -> bool:
        """Zero delta. Still a real selection, shown as "No charge"."""
        return self.price_delta == 0

    @property
    def price_label(self) -> str:
        if self.price_delta > 0:
            return f"+{format_money(self.price_delta)}"
        if self.price_delta < 0:
            return format_money(self.price_delta)
        return "No charge"


# ═══════════════════════════════════════════════════════════════════════════════
# Product — Immutable Catalog Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """
    Snapshot of a catalog record, copied into a cart line at selection time.

    Later catalog edits produce a new Product; existing lines keep theirs.
    """

    id: str
    name: str
    base_price: Money
    modifier_options: tuple[Modifier, ...] = ()
    allows_modifications: bool = True
    taxable: bool = True

    @property
    def size_options(self) -> tuple[Modifier, ...]:
        return tuple(m for m in self.modifier_options if m.is_size)

    @property
    def addon_options(self) -> tuple[Modifier, ...]:
        return tuple(m for m in self.modifier_options if not m.is_size)

    @property
    def default_size(self) -> Modifier | None:
        """First size option, pre-selected when a product is added."""
        sizes = self.size_options
        return sizes[0] if sizes else None

    def option(self, modifier_id: str) -> Modifier | None:
        for m in self.modifier_options:
            if m.id == modifier_id:
                return m
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Selection & Price
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Selection:
    """Chosen size + add-ons for one line. Add-on order is selection order."""

    size: Modifier | None = None
    modifiers: tuple[Modifier, ...] = ()

    @property
    def all(self) -> tuple[Modifier, ...]:
        return (self.size, *self.modifiers) if self.size else self.modifiers

    def has(self, modifier_id: str) -> bool:
        return any(m.id == modifier_id for m in self.all)


@dataclass(frozen=True, slots=True)
class LinePrice:
    """Exact (unrounded) unit price and line total."""

    unit_price: Money
    line_total: Money


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class PricingErrorKind(Enum):
    NOT_A_SIZE = auto()  # selected size is not in the "size" category
    SIZE_AS_ADDON = auto()  # "size" modifier passed among add-ons
    UNKNOWN_OPTION = auto()  # modifier not offered by the product
    DUPLICATE_MODIFIER = auto()
    MODIFICATIONS_DISABLED = auto()
    INVALID_QUANTITY = auto()


@dataclass(frozen=True, slots=True)
class PricingError:
    kind: PricingErrorKind
    message: str
    modifier_id: str | None = None


@dataclass(frozen=True, slots=True)
class CatalogError:
    """Catalog record failed validation at the boundary."""

    message: str
    product_id: str | None = None
    details: tuple[str, ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "SIZE_CATEGORY",
    "Modifier",
    "Product",
    "Selection",
    "LinePrice",
    "PricingErrorKind",
    "PricingError",
    "CatalogError",
)
