from decimal import Decimal

from hypothesis import given, strategies as st
from kungfu import Error, Ok

from tillflow.pricing import (
    Modifier,
    PricingErrorKind,
    Product,
    Selection,
    compute_line_price,
    toggle_modifier,
)

from conftest import CINNAMON, LARGE, LATTE, MEDIUM, MUFFIN, OAT, SHOT, SMALL, VANILLA

money = st.decimals(min_value=-5, max_value=500, places=2, allow_nan=False, allow_infinity=False)


class TestComputeLinePrice:
    def test_base_price_only(self):
        price = compute_line_price(LATTE, None, [], 1).unwrap()
        assert price.unit_price == Decimal("4.00")
        assert price.line_total == Decimal("4.00")

    def test_size_and_addons(self):
        price = compute_line_price(LATTE, LARGE, [OAT, SHOT], 2).unwrap()
        assert price.unit_price == Decimal("6.35")
        assert price.line_total == Decimal("12.70")

    def test_zero_price_modifier_is_valid(self):
        price = compute_line_price(LATTE, SMALL, [CINNAMON], 1).unwrap()
        assert price.unit_price == Decimal("4.00")
        assert CINNAMON.is_free
        assert CINNAMON.price_label == "No charge"
        assert OAT.price_label == "+$0.60"

    def test_not_rounded_per_term(self):
        odd = Modifier("extra:third", "Third", "extra", Decimal("0.333"))
        product = Product("p", "P", Decimal("1.001"), (odd,))
        price = compute_line_price(product, None, [odd], 3).unwrap()
        assert price.unit_price == Decimal("1.334")
        assert price.line_total == Decimal("4.002")

    def test_addon_passed_as_size(self):
        match compute_line_price(LATTE, OAT, [], 1):
            case Error(e):
                assert e.kind is PricingErrorKind.NOT_A_SIZE
            case Ok(_):
                raise AssertionError("expected rejection")

    def test_size_passed_as_addon(self):
        e = compute_line_price(LATTE, None, [MEDIUM], 1).unwrap_err()
        assert e.kind is PricingErrorKind.SIZE_AS_ADDON
        assert e.modifier_id == MEDIUM.id

    def test_duplicate_addon(self):
        e = compute_line_price(LATTE, None, [OAT, OAT], 1).unwrap_err()
        assert e.kind is PricingErrorKind.DUPLICATE_MODIFIER

    def test_option_from_another_product(self):
        foreign = Modifier("milk:soy", "Soy", "milk", Decimal("0.60"))
        e = compute_line_price(LATTE, None, [foreign], 1).unwrap_err()
        assert e.kind is PricingErrorKind.UNKNOWN_OPTION

    def test_product_without_modifications(self):
        e = compute_line_price(MUFFIN, None, [OAT], 1).unwrap_err()
        assert e.kind is PricingErrorKind.MODIFICATIONS_DISABLED

    def test_uses_catalog_delta_not_callers(self):
        forged = Modifier(OAT.id, OAT.name, OAT.category, Decimal("-10"))
        price = compute_line_price(LATTE, None, [forged], 1).unwrap()
        assert price.unit_price == Decimal("4.60")

    def test_quantity_must_be_positive_int(self):
        for qty in (0, -1, True, 1.5):
            e = compute_line_price(LATTE, None, [], qty).unwrap_err()
            assert e.kind is PricingErrorKind.INVALID_QUANTITY

    @given(
        base=money,
        size_delta=money,
        deltas=st.lists(money, max_size=6),
        quantity=st.integers(min_value=1, max_value=50),
    )
    def test_unit_price_is_exact_sum(self, base, size_delta, deltas, quantity):
        size = Modifier("size:x", "X", "size", size_delta)
        addons = [Modifier(f"extra:{i}", f"Extra {i}", "extra", d) for i, d in enumerate(deltas)]
        product = Product("p", "P", base, (size, *addons))

        price = compute_line_price(product, size, addons, quantity).unwrap()

        assert price.unit_price == base + size_delta + sum(deltas, Decimal(0))
        assert price.line_total == price.unit_price * quantity


class TestToggle:
    def test_toggle_adds_then_removes(self):
        selection = toggle_modifier(Selection(), OAT)
        assert selection.has(OAT.id)
        assert not toggle_modifier(selection, OAT).has(OAT.id)

    def test_size_toggle_replaces_active_size(self):
        selection = toggle_modifier(Selection(size=SMALL), LARGE)
        assert selection.size == LARGE

    def test_toggle_active_size_clears_it(self):
        assert toggle_modifier(Selection(size=LARGE), LARGE).size is None

    @given(
        steps=st.lists(st.sampled_from([OAT, SHOT, VANILLA, CINNAMON]), max_size=12),
        target=st.sampled_from([OAT, SHOT, VANILLA, CINNAMON]),
    )
    def test_double_toggle_restores_selection(self, steps, target):
        selection = Selection(size=MEDIUM)
        for m in steps:
            selection = toggle_modifier(selection, m)

        twice = toggle_modifier(toggle_modifier(selection, target), target)

        assert {m.id for m in twice.all} == {m.id for m in selection.all}
        assert twice.size == selection.size

    @given(size=st.sampled_from([SMALL, MEDIUM, LARGE]))
    def test_double_size_toggle_without_active_size(self, size):
        selection = Selection(modifiers=(OAT,))
        assert toggle_modifier(toggle_modifier(selection, size), size) == selection
