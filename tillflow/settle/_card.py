"""
Card settlement — intent creation then confirmation, with rollback.

Runs as a two-step compensated sequence: a created intent is recorded
together with its abandon action, and the abandon runs (in reverse order)
whenever confirmation does not succeed or the checkout is cancelled.

Note: every processor call goes through catching_async + timeout, so a
raise or a hang always surfaces as an Error value. Intent creation keeps
running past its deadline; an intent that lands late is abandoned.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from combinators import lift as L, timeout as C_timeout, TimeoutError as CTimeoutError
from kungfu import Result, Ok, Error, LazyCoroResult

from tillflow._types import Money
from tillflow.processor import (
    PaymentProcessor,
    PaymentIntent,
    CardDetails,
    CardConfirmation,
    ProcessorUnavailable,
)
from tillflow.settle._types import SettlementError, SettlementErrorKind

logger = logging.getLogger(__name__)

type Compensator = Callable[[PaymentIntent], Awaitable[None]]
type RecordedCompensator = tuple[PaymentIntent, Compensator]

# ═══════════════════════════════════════════════════════════════════════════════
# Error Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def processor_error(exc: Exception) -> SettlementError:
    match exc:
        case ProcessorUnavailable():
            return SettlementError(
                SettlementErrorKind.ADAPTER_UNAVAILABLE,
                str(exc) or "Payment processor is not available",
            )
        case _:
            return SettlementError(
                SettlementErrorKind.TRANSPORT,
                f"Payment processor error: {exc}" if str(exc) else "Payment processor error",
            )


def _widen[T](result: Result[T, SettlementError | CTimeoutError]) -> Result[T, SettlementError]:
    match result:
        case Ok(value):
            return Ok(value)
        case Error(CTimeoutError() as t):
            return Error(SettlementError(
                SettlementErrorKind.TIMEOUT,
                f"Payment processor did not respond within {t.seconds:g}s",
            ))
        case Error(e):
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# CardSettlement
# ═══════════════════════════════════════════════════════════════════════════════


class CardSettlement:
    """
    One card attempt against a processor.

    Example:
        card_run = CardSettlement(processor, timeout_seconds=30)
        match await card_run.run(total, CardDetails("pm_card_visa"), "Jane Doe"):
            case Ok(confirmation):
                confirmation.reference
            case Error(e):
                e.kind  # PAYMENT_DECLINED, TIMEOUT, TRANSPORT, ...

        # from another task, while run() is pending:
        await card_run.abandon()
    """

    def __init__(self, processor: PaymentProcessor, timeout_seconds: float) -> None:
        self._processor = processor
        self._timeout = timeout_seconds
        self._compensators: list[RecordedCompensator] = []
        self._late: set[asyncio.Future[tuple[int, int]]] = set()

    @property
    def intent(self) -> PaymentIntent | None:
        """Created intent still awaiting confirmation or abandon."""
        return self._compensators[-1][0] if self._compensators else None

    # ----- steps -----

    def create_step(self, total: Money) -> LazyCoroResult[PaymentIntent, SettlementError]:
        async def create() -> Result[PaymentIntent, SettlementError]:
            # The processor call is shielded: a deadline or cancel stops the
            # wait, never the request, so a late intent can still be abandoned.
            pending = asyncio.ensure_future(self._processor.create_intent(total))
            action = L.catching_async(
                lambda: asyncio.shield(pending),
                on_error=processor_error,
            )
            try:
                result = _widen(await C_timeout(action, seconds=self._timeout))
            except asyncio.CancelledError:
                self._abandon_when_created(pending)
                raise
            if not isinstance(result, Ok):
                self._abandon_when_created(pending)
            return result

        return LazyCoroResult(create)

    def confirm_step(
        self,
        intent: PaymentIntent,
        card: CardDetails,
        billing_name: str | None,
    ) -> LazyCoroResult[CardConfirmation, SettlementError]:
        async def confirm() -> Result[CardConfirmation, SettlementError]:
            action = L.catching_async(
                lambda: self._processor.confirm_card_payment(
                    intent.client_secret, card, billing_name
                ),
                on_error=processor_error,
            )
            match _widen(await C_timeout(action, seconds=self._timeout)):
                case Ok(CardConfirmation(status="succeeded") as confirmation):
                    return Ok(confirmation)
                case Ok(other):
                    # Anything but an explicit success is a decline.
                    message = getattr(other, "error_message", None)
                    return Error(SettlementError(
                        SettlementErrorKind.PAYMENT_DECLINED,
                        message or "Payment was declined",
                    ))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(confirm)

    # ----- execution -----

    async def _abandon_intent(self, intent: PaymentIntent) -> None:
        await self._processor.cancel_intent(intent.intent_id)

    def _abandon_when_created(self, pending: asyncio.Future[PaymentIntent]) -> None:
        """Abandon the intent `pending` produces, whenever it arrives."""

        def on_done(fut: asyncio.Future[PaymentIntent]) -> None:
            if fut.cancelled() or fut.exception() is not None:
                return
            intent = fut.result()
            logger.warning("card: intent %s arrived after the attempt ended", intent.intent_id)
            self._compensators.append((intent, self._abandon_intent))
            task = asyncio.ensure_future(self.abandon())
            self._late.add(task)
            task.add_done_callback(self._late.discard)

        pending.add_done_callback(on_done)

    async def run(
        self,
        total: Money,
        card: CardDetails,
        billing_name: str | None,
    ) -> Result[CardConfirmation, SettlementError]:
        """Create, then confirm. Rolls back the intent on any failure."""
        match await self.create_step(total):
            case Ok(intent):
                self._compensators.append((intent, self._abandon_intent))
                logger.debug("card: intent %s created", intent.intent_id)
            case Error(e):
                return Error(e)

        match await self.confirm_step(intent, card, billing_name):
            case Ok(confirmation):
                self._compensators.clear()
                return Ok(confirmation)
            case Error(e):
                logger.debug("card: intent %s not confirmed (%s)", intent.intent_id, e.kind.name)
                await self.abandon()
                return Error(e)

    async def abandon(self) -> tuple[int, int]:
        """
        Run recorded compensators in reverse. Returns (run, failed).

        Abandon is best-effort: failures are logged, never raised.
        """
        compensators, self._compensators = self._compensators, []
        comp_run = 0
        comp_failed = 0

        for intent, comp in reversed(compensators):
            try:
                await comp(intent)
                comp_run += 1
            except Exception:
                comp_failed += 1
                logger.exception("card: failed to abandon intent %s", intent.intent_id)

        return comp_run, comp_failed


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("processor_error", "CardSettlement")
