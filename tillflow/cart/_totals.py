"""
Order totals — subtotal, tax, discount, tip and total.

Tax and discount amounts come from outside policy; this module only sums
what it is handed. Values stay exact until `rounded()` is called at the
display/persistence boundary.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

from tillflow._types import Money, ZERO, MoneyError, round_money, to_money, MoneyLike
from tillflow.cart._line import CartLine

DEFAULT_CUSTOMER = "Walk-in Customer"
HUNDRED = Decimal(100)

# ═══════════════════════════════════════════════════════════════════════════════
# Tax Policy — Opaque Per-Line Amounts
# ═══════════════════════════════════════════════════════════════════════════════


class TaxPolicy(Protocol):
    """Produces the tax owed on one line. Lookup of the rate is up to the caller."""

    def line_tax(self, line: CartLine) -> Money: ...


@dataclass(frozen=True, slots=True)
class NoTax:
    def line_tax(self, line: CartLine) -> Money:
        return ZERO


@dataclass(frozen=True, slots=True)
class FlatRateTax:
    """
    Single rate applied to taxable products.

    Example:
        FlatRateTax(Decimal("0.08"))   # 8% sales tax
    """

    rate: Money

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ValueError("Tax rate cannot be negative")

    def line_tax(self, line: CartLine) -> Money:
        if not line.product.taxable:
            return ZERO
        return line.line_total * self.rate


# ═══════════════════════════════════════════════════════════════════════════════
# Discount Record
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class Discount:
    """
    A discount record as stored by the back office.

    Which discount applies (and who may approve it) is decided elsewhere;
    `amount_for` only resolves a chosen record to an amount.
    """

    name: str
    kind: DiscountKind
    value: Money
    requires_manager: bool = False

    def amount_for(self, subtotal: Money) -> Money:
        if self.value <= 0:
            return ZERO
        match self.kind:
            case DiscountKind.PERCENTAGE:
                return subtotal * min(self.value, HUNDRED) / 100
            case DiscountKind.FIXED:
                return min(self.value, subtotal) if subtotal > 0 else ZERO


type DiscountInput = Discount | MoneyLike


def _checked(discount: DiscountInput) -> Discount | Money:
    if isinstance(discount, Discount):
        return discount
    amount = to_money(discount)
    if amount < 0:
        raise MoneyError(f"Discount cannot be negative: {discount!r}")
    return amount


def check_discounts(discounts: Iterable[DiscountInput]) -> tuple[Discount | Money, ...]:
    """
    Validate discounts where they enter, so totals never meet a bad one.

    Raises MoneyError for floats, unparseable text and negative amounts.
    """
    return tuple(_checked(d) for d in discounts)


def discount_total(subtotal: Money, discounts: Iterable[DiscountInput]) -> Money:
    total = ZERO
    for d in check_discounts(discounts):
        total += d.amount_for(subtotal) if isinstance(d, Discount) else d
    return total


# ═══════════════════════════════════════════════════════════════════════════════
# OrderTotals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderTotals:
    """
    total = subtotal + tax_amount + tip_amount − discount_amount, floored at 0.

    Build via `OrderTotals.compute` so `total` can never drift from its parts.
    """

    subtotal: Money
    tax_amount: Money
    discount_amount: Money
    tip_amount: Money
    total: Money

    @classmethod
    def compute(
        cls,
        subtotal: Money,
        tax_amount: Money = ZERO,
        discount_amount: Money = ZERO,
        tip_amount: Money = ZERO,
    ) -> OrderTotals:
        total = subtotal + tax_amount + tip_amount - discount_amount
        return cls(
            subtotal=subtotal,
            tax_amount=tax_amount,
            discount_amount=discount_amount,
            tip_amount=tip_amount,
            total=max(total, ZERO),
        )

    def with_tip(self, tip_amount: Money) -> OrderTotals:
        return OrderTotals.compute(
            self.subtotal, self.tax_amount, self.discount_amount, tip_amount
        )

    def rounded(self) -> OrderTotals:
        """
        Cent-rounded copy for display and persistence.

        Note: total is rounded from the exact total, not re-summed from the
        rounded parts, so the parts may differ from it by a cent.
        """
        return OrderTotals(
            subtotal=round_money(self.subtotal),
            tax_amount=round_money(self.tax_amount),
            discount_amount=round_money(self.discount_amount),
            tip_amount=round_money(self.tip_amount),
            total=round_money(self.total),
        )


EMPTY_TOTALS = OrderTotals.compute(ZERO)


# ═══════════════════════════════════════════════════════════════════════════════
# Order — Snapshot Of A Transaction
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    lines: tuple[CartLine, ...]
    totals: OrderTotals
    customer_name: str = DEFAULT_CUSTOMER

    @property
    def subtotal(self) -> Money:
        return self.totals.subtotal

    @property
    def total(self) -> Money:
        return self.totals.total

    @property
    def is_empty(self) -> bool:
        return not self.lines


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "DEFAULT_CUSTOMER",
    "TaxPolicy",
    "NoTax",
    "FlatRateTax",
    "DiscountKind",
    "Discount",
    "DiscountInput",
    "check_discounts",
    "discount_total",
    "OrderTotals",
    "EMPTY_TOTALS",
    "Order",
)
