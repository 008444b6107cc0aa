"""Shared fixtures: a small coffee-shop catalog and checkout helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from tillflow.cart import Cart, FlatRateTax
from tillflow.pricing import Modifier, Product
from tillflow.processor import CardDetails
from tillflow.processor.testing import ScriptedProcessor
from tillflow.settle import CheckoutSession, CheckoutPolicy


SMALL = Modifier("size:small", "Small", "size", Decimal("0"))
MEDIUM = Modifier("size:medium", "Medium", "size", Decimal("0.50"))
LARGE = Modifier("size:large", "Large", "size", Decimal("1.00"))
OAT = Modifier("milk:oat", "Oat Milk", "milk", Decimal("0.60"))
SHOT = Modifier("extra:shot", "Extra Shot", "extra", Decimal("0.75"))
VANILLA = Modifier("syrup:vanilla", "Vanilla", "syrup", Decimal("0.50"))
CINNAMON = Modifier("topping:cinnamon", "Cinnamon", "topping", Decimal("0"))

LATTE = Product(
    id="latte",
    name="Latte",
    base_price=Decimal("4.00"),
    modifier_options=(SMALL, MEDIUM, LARGE, OAT, SHOT, VANILLA, CINNAMON),
)
MUFFIN = Product(
    id="muffin",
    name="Blueberry Muffin",
    base_price=Decimal("2.50"),
    allows_modifications=False,
)
WATER = Product(
    id="water",
    name="Bottled Water",
    base_price=Decimal("1.25"),
    allows_modifications=False,
    taxable=False,
)

VISA = CardDetails("pm_card_visa", brand="visa", last4="4242")


@pytest.fixture
def latte() -> Product:
    return LATTE


@pytest.fixture
def muffin() -> Product:
    return MUFFIN


@pytest.fixture
def water() -> Product:
    return WATER


@pytest.fixture
def cart() -> Cart:
    return Cart()


@pytest.fixture
def ten_dollar_cart() -> Cart:
    """Untaxed cart whose subtotal is exactly 10.00."""
    c = Cart()
    c.add_product(MUFFIN, quantity=4).unwrap()
    return c


@pytest.fixture
def taxed_cart() -> Cart:
    c = Cart(tax=FlatRateTax(Decimal("0.08")))
    c.add_product(LATTE, modifiers=[OAT]).unwrap()
    c.add_product(WATER, quantity=2).unwrap()
    return c


@pytest.fixture
def processor() -> ScriptedProcessor:
    return ScriptedProcessor()


@pytest.fixture
def no_tip_policy() -> CheckoutPolicy:
    from tillflow.tip import NoTip

    return CheckoutPolicy().with_default_tip(NoTip())


@pytest.fixture
def session(processor: ScriptedProcessor, no_tip_policy: CheckoutPolicy) -> CheckoutSession:
    return CheckoutSession(processor, policy=no_tip_policy)
