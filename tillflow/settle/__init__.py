"""
Settle — checkout state machine and payment paths.

    from tillflow import settle as S

    session = S.CheckoutSession(processor, policy=S.CheckoutPolicy.from_env())
    session.open(cart, customer_name="Jane")

    # Cash
    session.select_method(S.CASH)
    session.enter_cash_received("20")
    result = await session.settle()

    # Card
    session.select_method(S.CARD)
    session.set_card_details(CardDetails("pm_card_visa"), billing_name="Jane")
    result = await session.settle(timeout=15)

    # Abandon (from another task)
    await session.cancel()
"""

from __future__ import annotations

from tillflow.settle._types import (
    PaymentMethod,
    CheckoutState,
    AttemptStatus,
    PaymentSplit,
    PaymentAttempt,
    PaymentRecord,
    CancelNotice,
    SettlementErrorKind,
    SettlementError,
)
from tillflow.settle.policy import (
    TIP_PERCENT_ENV,
    TIMEOUT_ENV,
    METHOD_ENV,
    CheckoutPolicy,
    DEFAULT_POLICY,
)
from tillflow.settle._cash import CashOutcome, change_for, settle_cash
from tillflow.settle._card import CardSettlement, processor_error
from tillflow.settle._split import SPLIT_UNAVAILABLE, allocated, split_unavailable
from tillflow.settle._session import OnSettled, OnCancel, CheckoutSession

# Singleton instances for convenience
CASH = PaymentMethod.CASH
CARD = PaymentMethod.CARD
SPLIT = PaymentMethod.SPLIT

__all__ = (
    # Types
    "PaymentMethod",
    "CheckoutState",
    "AttemptStatus",
    "PaymentSplit",
    "PaymentAttempt",
    "PaymentRecord",
    "CancelNotice",
    "SettlementErrorKind",
    "SettlementError",
    "CASH",
    "CARD",
    "SPLIT",
    # Policy
    "TIP_PERCENT_ENV",
    "TIMEOUT_ENV",
    "METHOD_ENV",
    "CheckoutPolicy",
    "DEFAULT_POLICY",
    # Paths
    "CashOutcome",
    "change_for",
    "settle_cash",
    "CardSettlement",
    "processor_error",
    "SPLIT_UNAVAILABLE",
    "allocated",
    "split_unavailable",
    # Session
    "OnSettled",
    "OnCancel",
    "CheckoutSession",
)
