"""
In-memory processors for tests and demos.

    proc = ScriptedProcessor(confirmations=[decline("Insufficient funds"), approve()])
    proc.calls    # [("create_intent", Decimal("12.34")), ...]
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Iterable
from itertools import count

from tillflow._types import Money
from tillflow.processor._types import (
    SUCCEEDED,
    FAILED,
    PaymentIntent,
    CardDetails,
    CardConfirmation,
    ProcessorUnavailable,
)

type Outcome = CardConfirmation | Exception


def approve(reference: str | None = None) -> CardConfirmation:
    return CardConfirmation(status=SUCCEEDED, reference=reference)


def decline(message: str = "Your card was declined.") -> CardConfirmation:
    return CardConfirmation(status=FAILED, error_message=message)


class ScriptedProcessor:
    """
    Plays back scripted outcomes in order; approves once the script runs out.

    Exceptions in the script are raised from the call they land on.
    `gate`, when set, holds every confirm until the test releases it.
    """

    def __init__(
        self,
        confirmations: Iterable[Outcome] = (),
        intent_errors: Iterable[Exception | None] = (),
        cancel_error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self._confirmations: deque[Outcome] = deque(confirmations)
        self._intent_errors: deque[Exception | None] = deque(intent_errors)
        self._cancel_error = cancel_error
        self._ids = count(1)
        self.gate = gate
        self.calls: list[tuple[str, object]] = []

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def create_intent(self, amount: Money) -> PaymentIntent:
        self.calls.append(("create_intent", amount))
        if self._intent_errors:
            error = self._intent_errors.popleft()
            if error is not None:
                raise error
        n = next(self._ids)
        return PaymentIntent(f"pi_test_{n}", f"pi_test_{n}_secret_{n}", amount)

    async def confirm_card_payment(
        self,
        client_secret: str,
        card: CardDetails,
        billing_name: str | None,
    ) -> CardConfirmation:
        self.calls.append(("confirm_card_payment", client_secret))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self._confirmations.popleft() if self._confirmations else approve()
        if isinstance(outcome, Exception):
            raise outcome
        if outcome.reference is None:
            return CardConfirmation(
                outcome.status,
                client_secret.split("_secret_")[0],
                outcome.error_message,
            )
        return outcome

    async def cancel_intent(self, intent_id: str) -> None:
        self.calls.append(("cancel_intent", intent_id))
        if self._cancel_error is not None:
            raise self._cancel_error


class HangingProcessor(ScriptedProcessor):
    """Creates intents normally; confirmation never returns."""

    async def confirm_card_payment(
        self,
        client_secret: str,
        card: CardDetails,
        billing_name: str | None,
    ) -> CardConfirmation:
        self.calls.append(("confirm_card_payment", client_secret))
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class UnavailableProcessor:
    """Processor with no credentials."""

    def __init__(self, message: str = "Payment processor not configured") -> None:
        self.message = message

    async def create_intent(self, amount: Money) -> PaymentIntent:
        raise ProcessorUnavailable(self.message)

    async def confirm_card_payment(
        self,
        client_secret: str,
        card: CardDetails,
        billing_name: str | None,
    ) -> CardConfirmation:
        raise ProcessorUnavailable(self.message)

    async def cancel_intent(self, intent_id: str) -> None:
        raise ProcessorUnavailable(self.message)


__all__ = (
    "Outcome",
    "approve",
    "decline",
    "ScriptedProcessor",
    "HangingProcessor",
    "UnavailableProcessor",
)
