"""
Cart — line aggregation and order totals.

    from tillflow import cart as K

    cart = K.Cart(tax=K.FlatRateTax(Decimal("0.08")))
    cart.add_product(latte, modifiers=[oat])
    cart.update_line(0, K.LinePatch(quantity=2))
    cart.remove_line(0)

    totals = cart.recompute(tip=Decimal("2.00"), discounts=[K.Discount(...)])
    totals.rounded().total
"""

from __future__ import annotations

from tillflow.cart._line import (
    MAX_INSTRUCTIONS,
    CartErrorKind,
    CartError,
    KEEP,
    LinePatch,
    CartLine,
    make_line,
)
from tillflow.cart._totals import (
    DEFAULT_CUSTOMER,
    TaxPolicy,
    NoTax,
    FlatRateTax,
    DiscountKind,
    Discount,
    DiscountInput,
    check_discounts,
    discount_total,
    OrderTotals,
    EMPTY_TOTALS,
    Order,
)
from tillflow.cart._cart import DEFAULT_SIZE, Cart

__all__ = (
    "MAX_INSTRUCTIONS",
    "CartErrorKind",
    "CartError",
    "KEEP",
    "LinePatch",
    "CartLine",
    "make_line",
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
    "DEFAULT_SIZE",
    "Cart",
)
