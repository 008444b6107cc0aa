"""
Checkout walkthrough: build a cart, then settle by cash, by card and by split.

    python -m examples.checkout_example

Uses the scripted processor, so no Stripe key is needed.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Ok, Error

from tillflow import cart as K
from tillflow import format_money
from tillflow import settle as S
from tillflow import tip as T
from tillflow.processor import CardDetails
from tillflow.processor.testing import ScriptedProcessor, decline

from examples._infra import CROISSANT, LARGE, LATTE, OAT, SHOT, banner, run


def build_cart() -> K.Cart:
    cart = K.Cart(tax=K.FlatRateTax(Decimal("0.08")))
    cart.add_product(LATTE, size=LARGE, modifiers=[OAT, SHOT], special_instructions="extra hot")
    cart.add_product(CROISSANT, quantity=2)
    for line in cart:
        mods = ", ".join(m.name for m in line.modifications) or "-"
        print(f"  {line.quantity} x {line.product.name:<10} [{mods}]  {format_money(line.line_total)}")
    return cart


def show(result) -> None:
    match result:
        case Ok(record):
            print(f"  settled {record.method.value}: {format_money(record.total_amount)}")
            if record.change_given is not None:
                print(f"  change: {format_money(record.change_given)}")
            if record.processor_reference:
                print(f"  reference: {record.processor_reference}")
        case Error(e):
            print(f"  {e.kind.name}: {e.message} (retryable={e.retryable})")


async def main() -> None:
    banner("Cart")
    cart = build_cart()
    totals = cart.recompute(tip=T.resolve_tip(T.DEFAULT_TIP, cart.subtotal())).rounded()
    print(f"  subtotal {format_money(totals.subtotal)}  tax {format_money(totals.tax_amount)}"
          f"  tip {format_money(totals.tip_amount)}  total {format_money(totals.total)}")

    banner("Cash")
    session = S.CheckoutSession(policy=S.CheckoutPolicy().with_default_method(S.CASH))
    session.open(cart, customer_name="Jane")
    session.enter_cash_received("15")
    show(await session.settle())                 # insufficient funds, dialog stays open
    session.enter_cash_received("20")
    show(await session.settle())

    banner("Card (declined, then approved)")
    processor = ScriptedProcessor(confirmations=[decline("Insufficient funds")])
    session = S.CheckoutSession(processor)
    session.open(cart)
    session.select_tip(T.CustomTip("3"))
    session.set_card_details(CardDetails("pm_card_visa", "visa", "4242"), billing_name="Jane Doe")
    show(await session.settle())
    show(await session.settle())
    print(f"  processor calls: {[name for name, _ in processor.calls]}")

    banner("Split")
    session.open(cart)
    session.select_method(S.SPLIT)
    session.set_splits([S.PaymentSplit(S.CASH, Decimal("10")), S.PaymentSplit(S.CARD, Decimal("10"))])
    show(await session.settle())


if __name__ == "__main__":
    run(main)
