from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from tillflow.cart import (
    Cart,
    CartErrorKind,
    Discount,
    check_discounts,
    DiscountKind,
    FlatRateTax,
    LinePatch,
    MAX_INSTRUCTIONS,
    OrderTotals,
)
from tillflow import MoneyError
from tillflow.pricing import Product

from conftest import LARGE, LATTE, MEDIUM, MUFFIN, OAT, SHOT, SMALL, WATER


class TestCartLines:
    def test_add_product_preselects_first_size(self, cart):
        line = cart.add_product(LATTE).unwrap()
        assert line.selected_size == SMALL
        assert line.unit_price == Decimal("4.00")

    def test_add_product_without_size(self, cart):
        line = cart.add_product(LATTE, size=None, modifiers=[OAT]).unwrap()
        assert line.selected_size is None
        assert line.modifications == (OAT,)

    def test_identical_lines_are_not_merged(self, cart):
        cart.add_product(LATTE, modifiers=[OAT]).unwrap()
        cart.add_product(LATTE, modifiers=[OAT]).unwrap()
        assert len(cart) == 2

        cart.update_line(1, LinePatch(quantity=3)).unwrap()
        assert [line.quantity for line in cart] == [1, 3]

    def test_update_reprices(self, cart):
        cart.add_product(LATTE).unwrap()
        line = cart.update_line(0, LinePatch(size=LARGE, modifiers=(OAT, SHOT), quantity=2)).unwrap()
        assert line.unit_price == Decimal("6.35")
        assert line.line_total == Decimal("12.70")
        assert cart.subtotal() == Decimal("12.70")

    def test_update_keeps_unpatched_fields(self, cart):
        cart.add_product(LATTE, size=MEDIUM, modifiers=[OAT], special_instructions="extra hot").unwrap()
        line = cart.update_line(0, LinePatch(quantity=2)).unwrap()
        assert line.selected_size == MEDIUM
        assert line.selected_modifiers == (OAT,)
        assert line.special_instructions == "extra hot"

    def test_update_missing_index_is_rejected(self, cart):
        cart.add_product(MUFFIN).unwrap()
        for index in (1, -1, 5):
            e = cart.update_line(index, LinePatch(quantity=2)).unwrap_err()
            assert e.kind is CartErrorKind.NO_SUCH_LINE
        assert cart[0].quantity == 1

    def test_rejected_patch_leaves_line(self, cart):
        cart.add_product(LATTE).unwrap()
        e = cart.update_line(0, LinePatch(quantity=0)).unwrap_err()
        assert e.kind is CartErrorKind.PRICING
        assert cart[0].quantity == 1

    def test_instructions_limit(self, cart):
        e = cart.add_product(LATTE, special_instructions="x" * (MAX_INSTRUCTIONS + 1)).unwrap_err()
        assert e.kind is CartErrorKind.INSTRUCTIONS_TOO_LONG
        assert cart.is_empty
        assert cart.add_product(LATTE, special_instructions="   ").unwrap().special_instructions is None

    def test_remove_last_line(self, cart):
        cart.add_product(MUFFIN).unwrap()
        cart.remove_line(0).unwrap()
        assert cart.subtotal() == 0
        assert cart.recompute().total == 0
        assert cart.remove_line(0).unwrap_err().kind is CartErrorKind.NO_SUCH_LINE

    def test_line_keeps_its_product_snapshot(self, cart):
        cart.add_product(MUFFIN).unwrap()
        repriced = Product(MUFFIN.id, MUFFIN.name, Decimal("9.99"), allows_modifications=False)
        cart.add_product(repriced).unwrap()
        assert [line.unit_price for line in cart] == [Decimal("2.50"), Decimal("9.99")]


class TestTotals:
    def test_empty_cart(self, cart):
        assert cart.subtotal() == Decimal("0")
        assert cart.recompute() == OrderTotals.compute(Decimal("0"))

    def test_tax_only_on_taxable_lines(self, taxed_cart):
        totals = taxed_cart.recompute()
        assert totals.subtotal == Decimal("7.10")
        assert totals.tax_amount == Decimal("0.368")
        assert totals.rounded().tax_amount == Decimal("0.37")

    def test_order_level_tax_overrides_policy(self, taxed_cart):
        assert taxed_cart.recompute(tax=Decimal("1.00")).tax_amount == Decimal("1.00")

    def test_total_formula(self, taxed_cart):
        totals = taxed_cart.recompute(tip=Decimal("2.00"), discounts=[Decimal("1.10")])
        assert totals.total == Decimal("7.10") + Decimal("0.368") + Decimal("2.00") - Decimal("1.10")

    def test_discount_records(self):
        subtotal = Decimal("20.00")
        assert Discount("10% off", DiscountKind.PERCENTAGE, Decimal("10")).amount_for(subtotal) == Decimal("2")
        assert Discount("$5 off", DiscountKind.FIXED, Decimal("5")).amount_for(subtotal) == Decimal("5")
        assert Discount("$50 off", DiscountKind.FIXED, Decimal("50")).amount_for(subtotal) == subtotal

    def test_discounts_checked_where_they_enter(self):
        staff = Discount("Staff", DiscountKind.FIXED, Decimal("1"))
        assert check_discounts([staff, "0.50", 2]) == (staff, Decimal("0.50"), Decimal("2"))

        for bad in (0.5, "-1", "free"):
            with pytest.raises(MoneyError):
                check_discounts([bad])

    def test_negative_discount_never_raises_the_total(self, cart):
        cart.add_product(MUFFIN).unwrap()
        with pytest.raises(MoneyError):
            cart.recompute(discounts=[Decimal("-5")])

    def test_total_never_negative(self, cart):
        cart.add_product(MUFFIN).unwrap()
        assert cart.recompute(discounts=[Decimal("100")]).total == 0

    def test_rounded_once_at_the_boundary(self):
        totals = OrderTotals.compute(
            subtotal=Decimal("0.005"),
            tax_amount=Decimal("0.005"),
        ).rounded()
        assert totals.subtotal == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("0.01")

    def test_snapshot(self, taxed_cart):
        order = taxed_cart.snapshot(customer_name="  ", tip=Decimal("1"))
        assert order.customer_name == "Walk-in Customer"
        assert order.lines == taxed_cart.lines
        assert order.totals.tip_amount == Decimal("1")

    @given(
        items=st.lists(
            st.tuples(
                st.decimals(min_value=0, max_value=200, places=2, allow_nan=False, allow_infinity=False),
                st.integers(min_value=1, max_value=20),
            ),
            max_size=10,
        ),
        data=st.data(),
    )
    def test_subtotal_is_order_independent(self, items, data):
        products = [
            (Product(f"p{i}", f"Item {i}", price, allows_modifications=False), qty)
            for i, (price, qty) in enumerate(items)
        ]
        shuffled = data.draw(st.permutations(products))

        forward, backward = Cart(tax=FlatRateTax(Decimal("0.0825"))), Cart(tax=FlatRateTax(Decimal("0.0825")))
        for product, qty in products:
            forward.add_product(product, quantity=qty).unwrap()
        for product, qty in shuffled:
            backward.add_product(product, quantity=qty).unwrap()

        assert forward.subtotal() == backward.subtotal()
        assert forward.subtotal() == sum((line.line_total for line in forward), Decimal(0))
        assert forward.recompute() == backward.recompute()


def test_water_is_untaxed():
    cart = Cart(tax=FlatRateTax(Decimal("0.08")))
    cart.add_product(WATER).unwrap()
    assert cart.recompute().tax_amount == 0
