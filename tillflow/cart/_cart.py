"""
Cart aggregator — ordered, index-addressed collection of cart lines.

Identical lines are never merged: two "Latte, oat" entries stay two entries,
each edited and removed on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Final

from kungfu import Result, Ok, Error

from tillflow._types import Money, ZERO
from tillflow.pricing import Modifier, Product
from tillflow.cart._line import (
    CartLine,
    CartError,
    CartErrorKind,
    LinePatch,
    make_line,
)
from tillflow.cart._totals import (
    DEFAULT_CUSTOMER,
    TaxPolicy,
    NoTax,
    DiscountInput,
    OrderTotals,
    Order,
    discount_total,
)

logger = logging.getLogger(__name__)


class _DefaultSize:
    def __repr__(self) -> str:
        return "DEFAULT_SIZE"


DEFAULT_SIZE: Final = _DefaultSize()
"""Pick the product's first size option (if it has any)."""


class Cart:
    """
    Lines of the active transaction plus the tax policy used to total them.

    Example:
        cart = Cart(tax=FlatRateTax(Decimal("0.08")))
        cart.add_product(latte, modifiers=[oat])
        cart.update_line(0, LinePatch(quantity=2))
        totals = cart.recompute(tip=Decimal("1.50"))
    """

    def __init__(self, tax: TaxPolicy | None = None) -> None:
        self._lines: list[CartLine] = []
        self._tax: TaxPolicy = tax if tax is not None else NoTax()

    # ----- collection protocol -----

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(tuple(self._lines))

    def __getitem__(self, index: int) -> CartLine:
        return self._lines[index]

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def tax_policy(self) -> TaxPolicy:
        return self._tax

    def _check_index(self, index: int) -> Result[int, CartError]:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._lines):
            return Error(CartError(CartErrorKind.NO_SUCH_LINE, f"No cart line at index {index!r}"))
        return Ok(index)

    # ----- edits -----

    def add_line(self, line: CartLine) -> int:
        """Append a priced line. Returns its index."""
        self._lines.append(line)
        logger.debug("cart: added %s x%d at %d", line.product.name, line.quantity, len(self._lines) - 1)
        return len(self._lines) - 1

    def add_product(
        self,
        product: Product,
        quantity: int = 1,
        size: Modifier | None | _DefaultSize = DEFAULT_SIZE,
        modifiers: Iterable[Modifier] = (),
        special_instructions: str | None = None,
    ) -> Result[CartLine, CartError]:
        """Price a product selection and append it."""
        chosen_size = product.default_size if isinstance(size, _DefaultSize) else size
        match make_line(product, quantity, chosen_size, modifiers, special_instructions):
            case Ok(line):
                self.add_line(line)
                return Ok(line)
            case Error(e):
                return Error(e)

    def update_line(self, index: int, patch: LinePatch) -> Result[CartLine, CartError]:
        """
        Re-price line `index` with patched fields.

        The cart is unchanged when the index is missing or pricing rejects the patch.
        """
        match self._check_index(index):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match self._lines[index].with_changes(patch):
            case Ok(line):
                self._lines[index] = line
                logger.debug("cart: updated line %d", index)
                return Ok(line)
            case Error(e):
                return Error(e)

    def remove_line(self, index: int) -> Result[CartLine, CartError]:
        match self._check_index(index):
            case Error(e):
                return Error(e)
            case Ok(_):
                removed = self._lines.pop(index)
                logger.debug("cart: removed line %d", index)
                return Ok(removed)

    def clear(self) -> None:
        self._lines.clear()

    # ----- totals -----

    def subtotal(self) -> Money:
        return sum((line.line_total for line in self._lines), ZERO)

    def recompute(
        self,
        tip: Money = ZERO,
        discounts: Iterable[DiscountInput] = (),
        tax: Money | None = None,
    ) -> OrderTotals:
        """
        Derive exact order totals.

        `tax`, when given, is an order-level amount used instead of the
        per-line tax policy. Tip and discounts are taken as handed in.
        """
        subtotal = self.subtotal()
        if tax is None:
            tax = sum((self._tax.line_tax(line) for line in self._lines), ZERO)
        return OrderTotals.compute(
            subtotal=subtotal,
            tax_amount=tax,
            discount_amount=discount_total(subtotal, discounts),
            tip_amount=tip,
        )

    def snapshot(
        self,
        customer_name: str = DEFAULT_CUSTOMER,
        tip: Money = ZERO,
        discounts: Iterable[DiscountInput] = (),
    ) -> Order:
        """Freeze the current lines and totals into an Order."""
        return Order(
            lines=self.lines,
            totals=self.recompute(tip=tip, discounts=discounts),
            customer_name=customer_name.strip() or DEFAULT_CUSTOMER,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("DEFAULT_SIZE", "Cart")
