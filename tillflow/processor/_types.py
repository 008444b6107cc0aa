"""
Payment processor contract — consumed, not implemented, by settlement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from tillflow._types import Money

SUCCEEDED = "succeeded"
FAILED = "failed"

# ═══════════════════════════════════════════════════════════════════════════════
# Wire Shapes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """Processor handle for an authorized-but-unconfirmed charge."""

    intent_id: str
    client_secret: str
    amount: Money

    def __repr__(self) -> str:
        # client_secret stays out of logs and tracebacks
        return f"PaymentIntent(intent_id={self.intent_id!r}, amount={self.amount!r})"


@dataclass(frozen=True, slots=True)
class CardDetails:
    """
    Card collected by the terminal UI.

    Note: a tokenized payment method id (e.g. "pm_..."), never a raw PAN.
    """

    payment_method: str
    brand: str | None = None
    last4: str | None = None

    def __repr__(self) -> str:
        return f"CardDetails(brand={self.brand!r}, last4={self.last4!r})"


@dataclass(frozen=True, slots=True)
class CardConfirmation:
    status: Literal["succeeded", "failed"] | str
    reference: str | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED


# ═══════════════════════════════════════════════════════════════════════════════
# Errors — Raised By Adapters
# ═══════════════════════════════════════════════════════════════════════════════


class ProcessorUnavailable(Exception):
    """Processor is not configured or cannot be reached at all."""


class ProcessorError(Exception):
    """Transport or API failure while talking to the processor."""


# ═══════════════════════════════════════════════════════════════════════════════
# PaymentProcessor Protocol — Adapters Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentProcessor(Protocol):
    """
    Card processor adapter.

    Example:
        class MyGateway:
            async def create_intent(self, amount: Decimal) -> PaymentIntent:
                resp = await self.http.post("/intents", json={"amount": str(amount)})
                return PaymentIntent(resp["id"], resp["secret"], amount)

            async def confirm_card_payment(self, client_secret, card, billing_name):
                ...

            async def cancel_intent(self, intent_id: str) -> None:
                await self.http.post(f"/intents/{intent_id}/cancel")
    """

    async def create_intent(self, amount: Money) -> PaymentIntent:
        """Request an intent for `amount` (already rounded to cents)."""
        ...

    async def confirm_card_payment(
        self,
        client_secret: str,
        card: CardDetails,
        billing_name: str | None,
    ) -> CardConfirmation:
        """Confirm the intent. Declines are returned, not raised."""
        ...

    async def cancel_intent(self, intent_id: str) -> None:
        """Abandon an intent that will not be confirmed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "SUCCEEDED",
    "FAILED",
    "PaymentIntent",
    "CardDetails",
    "CardConfirmation",
    "ProcessorUnavailable",
    "ProcessorError",
    "PaymentProcessor",
)
