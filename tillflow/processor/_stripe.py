"""
Stripe adapter.

The stripe SDK is synchronous; each call runs in a worker thread so the
settlement loop stays responsive (and cancellable) while Stripe answers.
"""

from __future__ import annotations

import asyncio
import logging
import os

import stripe

from tillflow._types import Money, to_cents
from tillflow.processor._types import (
    SUCCEEDED,
    FAILED,
    PaymentIntent,
    CardDetails,
    CardConfirmation,
    ProcessorUnavailable,
    ProcessorError,
)

logger = logging.getLogger(__name__)

SECRET_KEY_ENV = "STRIPE_SECRET_KEY"
NOT_CONFIGURED = (
    "Stripe not configured. Please add STRIPE_SECRET_KEY to environment variables."
)


def intent_id_from_secret(client_secret: str) -> str:
    """`pi_123_secret_abc` → `pi_123`."""
    return client_secret.split("_secret_")[0]


class StripeProcessor:
    """
    PaymentProcessor backed by Stripe PaymentIntents.

    Example:
        processor = StripeProcessor.from_env()
        intent = await processor.create_intent(Decimal("12.34"))  # 1234 cents
    """

    def __init__(self, api_key: str | None, currency: str = "usd") -> None:
        self._api_key = api_key or None
        self._currency = currency.lower()

    @classmethod
    def from_env(cls, currency: str = "usd") -> StripeProcessor:
        return cls(os.environ.get(SECRET_KEY_ENV), currency=currency)

    @property
    def configured(self) -> bool:
        return self._api_key is not None

    def __repr__(self) -> str:
        return f"StripeProcessor(configured={self.configured}, currency={self._currency!r})"

    def _require_key(self) -> str:
        if self._api_key is None:
            raise ProcessorUnavailable(NOT_CONFIGURED)
        return self._api_key

    # ----- PaymentProcessor -----

    async def create_intent(self, amount: Money) -> PaymentIntent:
        api_key = self._require_key()
        cents = to_cents(amount)
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=cents,
                currency=self._currency,
                metadata={"integration_check": "accept_a_payment"},
                api_key=api_key,
            )
        except stripe.AuthenticationError as e:
            raise ProcessorUnavailable(str(e.user_message or e)) from e
        except stripe.StripeError as e:
            raise ProcessorError(str(e.user_message or e)) from e

        logger.info("stripe: created intent %s for %d cents", intent.id, cents)
        return PaymentIntent(
            intent_id=intent.id,
            client_secret=intent.client_secret,
            amount=amount,
        )

    async def confirm_card_payment(
        self,
        client_secret: str,
        card: CardDetails,
        billing_name: str | None,
    ) -> CardConfirmation:
        api_key = self._require_key()
        intent_id = intent_id_from_secret(client_secret)
        try:
            if billing_name:
                await asyncio.to_thread(
                    stripe.PaymentMethod.modify,
                    card.payment_method,
                    billing_details={"name": billing_name},
                    api_key=api_key,
                )
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.confirm,
                intent_id,
                payment_method=card.payment_method,
                api_key=api_key,
            )
        except stripe.CardError as e:
            logger.warning("stripe: card declined for %s (%s)", intent_id, e.code)
            return CardConfirmation(
                status=FAILED,
                reference=intent_id,
                error_message=e.user_message or "Card was declined",
            )
        except stripe.StripeError as e:
            raise ProcessorError(str(e.user_message or e)) from e

        if intent.status == SUCCEEDED:
            return CardConfirmation(status=SUCCEEDED, reference=intent.id)

        error = getattr(intent, "last_payment_error", None)
        message = getattr(error, "message", None) if error else None
        return CardConfirmation(
            status=FAILED,
            reference=intent.id,
            error_message=message or f"Payment not completed (status: {intent.status})",
        )

    async def cancel_intent(self, intent_id: str) -> None:
        api_key = self._require_key()
        try:
            await asyncio.to_thread(stripe.PaymentIntent.cancel, intent_id, api_key=api_key)
        except stripe.StripeError as e:
            raise ProcessorError(str(e.user_message or e)) from e
        logger.info("stripe: cancelled intent %s", intent_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "SECRET_KEY_ENV",
    "NOT_CONFIGURED",
    "intent_id_from_secret",
    "StripeProcessor",
)
