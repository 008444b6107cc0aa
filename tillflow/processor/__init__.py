"""
Processor — card payment adapters.

    from tillflow import processor as P

    stripe_proc = P.StripeProcessor.from_env()   # reads STRIPE_SECRET_KEY
    intent = await stripe_proc.create_intent(Decimal("12.34"))
    confirmation = await stripe_proc.confirm_card_payment(
        intent.client_secret, P.CardDetails("pm_card_visa"), "Jane Doe"
    )

Test doubles live in `tillflow.processor.testing`.
"""

from __future__ import annotations

from tillflow.processor._types import (
    SUCCEEDED,
    FAILED,
    PaymentIntent,
    CardDetails,
    CardConfirmation,
    ProcessorUnavailable,
    ProcessorError,
    PaymentProcessor,
)
from tillflow.processor._stripe import (
    SECRET_KEY_ENV,
    NOT_CONFIGURED,
    intent_id_from_secret,
    StripeProcessor,
)

__all__ = (
    "SUCCEEDED",
    "FAILED",
    "PaymentIntent",
    "CardDetails",
    "CardConfirmation",
    "ProcessorUnavailable",
    "ProcessorError",
    "PaymentProcessor",
    "SECRET_KEY_ENV",
    "NOT_CONFIGURED",
    "intent_id_from_secret",
    "StripeProcessor",
)
