"""
CheckoutSession — the settlement state machine for one checkout surface.

    IDLE ──select_method──▶ METHOD_SELECTED ──settle──▶ VALIDATING
                                                          │
                 cash / split ◀───────────────────────────┤
                                                          ▼ card
                                              AWAITING_CONFIRMATION
                                                          │
                              SETTLED ◀── ok ─────────────┼── error ──▶ FAILED (retry)
                                                          │
                  cancel() from any non-settled state ──▶ CANCELLED

Note: `open()` is the Idle initializer and runs on every open, so nothing
typed in a previous checkout leaks into the next one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence

from kungfu import Result, Ok, Error

from tillflow._types import Money, ZERO, parse_amount, round_money
from tillflow.cart import (
    Cart,
    CartLine,
    OrderTotals,
    DiscountInput,
    DEFAULT_CUSTOMER,
    EMPTY_TOTALS,
    check_discounts,
)
from tillflow.processor import PaymentProcessor, CardDetails, CardConfirmation
from tillflow.tip import TipState, TipSelection, TipOption
from tillflow.settle._types import (
    PaymentMethod,
    CheckoutState,
    AttemptStatus,
    PaymentSplit,
    PaymentAttempt,
    PaymentRecord,
    CancelNotice,
    SettlementError,
    SettlementErrorKind,
)
from tillflow.settle._cash import change_for, settle_cash
from tillflow.settle._card import CardSettlement
from tillflow.settle._split import split_unavailable
from tillflow.settle.policy import CheckoutPolicy, DEFAULT_POLICY

logger = logging.getLogger(__name__)

type OnSettled = Callable[[PaymentRecord], None]
type OnCancel = Callable[[CancelNotice], None]

_CANCELLED_MESSAGE = "Checkout cancelled"
_PROCESSOR_FAILURES = frozenset({
    SettlementErrorKind.ADAPTER_UNAVAILABLE,
    SettlementErrorKind.PAYMENT_DECLINED,
    SettlementErrorKind.TRANSPORT,
    SettlementErrorKind.TIMEOUT,
})


def _confirmed(task: asyncio.Task[Result[CardConfirmation, SettlementError]] | None) -> bool:
    """True when the card task finished with an accepted charge not yet settled."""
    if task is None or not task.done() or task.cancelled() or task.exception() is not None:
        return False
    return isinstance(task.result(), Ok)


class CheckoutSession:
    """
    One operator-facing checkout.

    Example:
        session = CheckoutSession(processor, on_settled=save_payment)
        session.open(cart, customer_name="Jane")
        session.select_method(PaymentMethod.CASH)
        session.enter_cash_received("20")

        match await session.settle():
            case Ok(record):
                record.change_given
            case Error(e):
                e.message   # shown in the dialog, which stays open
    """

    def __init__(
        self,
        processor: PaymentProcessor | None = None,
        policy: CheckoutPolicy = DEFAULT_POLICY,
        on_settled: OnSettled | None = None,
        on_cancel: OnCancel | None = None,
    ) -> None:
        self._processor = processor
        self._policy = policy
        self._on_settled = on_settled
        self._on_cancel = on_cancel

        self._cart: Cart | None = None
        self._discounts: tuple[DiscountInput, ...] = ()
        self._customer_name = DEFAULT_CUSTOMER
        self._is_open = False
        self._state = CheckoutState.IDLE
        self._method: PaymentMethod | None = policy.default_method
        self._tip = TipState(policy.default_tip)
        self._cash_received: str | None = None
        self._card: CardDetails | None = None
        self._billing_name: str | None = None
        self._splits: tuple[PaymentSplit, ...] = ()
        self._error: SettlementError | None = None
        self._attempt: PaymentAttempt | None = None
        self._attempts: list[PaymentAttempt] = []
        self._record: PaymentRecord | None = None
        self._frozen_lines: tuple[CartLine, ...] = ()
        self._task: asyncio.Task[Result[CardConfirmation, SettlementError]] | None = None
        self._card_run: CardSettlement | None = None

    # ═══════════════════════════════════════════════════════════════════════════
    # Lifecycle
    # ═══════════════════════════════════════════════════════════════════════════

    def open(
        self,
        cart: Cart,
        customer_name: str = DEFAULT_CUSTOMER,
        discounts: Iterable[DiscountInput] = (),
    ) -> None:
        """Attach a cart and reset every field to its Idle default."""
        if self._state.in_flight:
            raise RuntimeError("Cannot reopen checkout while a payment is in flight")

        discounts = check_discounts(discounts)
        self._cart = cart
        self._discounts = discounts
        self._customer_name = customer_name.strip() or DEFAULT_CUSTOMER
        self._is_open = True
        self._state = CheckoutState.IDLE
        self._method = self._policy.default_method
        self._tip = TipState(self._policy.default_tip)
        self._cash_received = None
        self._card = None
        self._billing_name = None
        self._splits = ()
        self._error = None
        self._attempt = None
        self._attempts = []
        self._record = None
        self._frozen_lines = ()
        self._task = None
        self._card_run = None
        logger.debug("checkout: opened for %s (%d lines)", self._customer_name, len(cart))

    def close(self) -> None:
        """Detach the cart. Does not cancel; call `cancel()` first if needed."""
        if self._state.in_flight:
            raise RuntimeError("Cannot close checkout while a payment is in flight")
        self._is_open = False
        self._cart = None

    # ═══════════════════════════════════════════════════════════════════════════
    # Read Side
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def policy(self) -> CheckoutPolicy:
        return self._policy

    @property
    def tip_options(self) -> tuple[TipOption, ...]:
        return self._policy.tip_options

    @property
    def method(self) -> PaymentMethod | None:
        return self._method

    @property
    def tip_selection(self) -> TipSelection:
        return self._tip.selection

    @property
    def custom_tip(self) -> Money | str | None:
        return self._tip.custom_amount

    @property
    def cash_received(self) -> str | None:
        return self._cash_received

    @property
    def card(self) -> CardDetails | None:
        return self._card

    @property
    def billing_name(self) -> str | None:
        return self._billing_name

    @property
    def splits(self) -> tuple[PaymentSplit, ...]:
        return self._splits

    @property
    def customer_name(self) -> str:
        return self._customer_name

    @property
    def error(self) -> SettlementError | None:
        return self._error

    @property
    def attempt(self) -> PaymentAttempt | None:
        return self._attempt

    @property
    def attempts(self) -> tuple[PaymentAttempt, ...]:
        return tuple(self._attempts)

    @property
    def record(self) -> PaymentRecord | None:
        return self._record

    @property
    def pending_intent_id(self) -> str | None:
        if self._card_run is None or self._card_run.intent is None:
            return None
        return self._card_run.intent.intent_id

    @property
    def tip_amount(self) -> Money:
        if self._cart is None:
            return ZERO
        return self._tip.amount_for(self._cart.subtotal())

    @property
    def totals(self) -> OrderTotals:
        """Live, exact totals. Percentage tips follow the current subtotal."""
        if self._cart is None:
            return EMPTY_TOTALS
        return self._cart.recompute(tip=self.tip_amount, discounts=self._discounts)

    @property
    def change_due(self) -> Money | None:
        """Preview of change for the typed cash, or None when nothing usable is typed."""
        received = parse_amount(self._cash_received)
        if received is None:
            return None
        return change_for(self.totals.rounded().total, received)

    @property
    def can_settle(self) -> bool:
        return (
            self._is_open
            and self._cart is not None
            and not self._cart.is_empty
            and self._method is not None
            and self._state in (
                CheckoutState.IDLE,
                CheckoutState.METHOD_SELECTED,
                CheckoutState.FAILED,
            )
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Inputs
    # ═══════════════════════════════════════════════════════════════════════════

    def _editable(self, what: str) -> bool:
        if not self._is_open or self._state.in_flight:
            logger.debug("checkout: ignoring %s in state %s", what, self._state.name)
            return False
        return True

    def _transition(self, state: CheckoutState) -> None:
        if state is not self._state:
            logger.debug("checkout: %s -> %s", self._state.name, state.name)
            self._state = state

    def select_method(self, method: PaymentMethod | None) -> None:
        if not self._editable("method change"):
            return
        self._method = method
        self._transition(CheckoutState.IDLE if method is None else CheckoutState.METHOD_SELECTED)

    def select_tip(self, selection: TipSelection) -> None:
        if self._editable("tip change"):
            self._tip.select(selection)

    def enter_custom_tip(self, text: Money | str | None) -> None:
        if self._editable("custom tip"):
            self._tip.enter_custom(text)

    def enter_cash_received(self, text: Money | str | None) -> None:
        if self._editable("cash input"):
            self._cash_received = None if text is None else str(text)

    def set_card_details(self, card: CardDetails | None, billing_name: str | None = None) -> None:
        if self._editable("card details"):
            self._card = card
            name = (billing_name or "").strip()
            self._billing_name = name or None

    def set_splits(self, splits: Sequence[PaymentSplit]) -> None:
        if self._editable("splits"):
            self._splits = tuple(splits)

    # ═══════════════════════════════════════════════════════════════════════════
    # settle()
    # ═══════════════════════════════════════════════════════════════════════════

    def _reject(self, error: SettlementError) -> Result[PaymentRecord, SettlementError]:
        """Surface a precondition failure without creating an attempt."""
        self._error = error
        logger.debug("checkout: rejected settle: %s", error.message)
        return Error(error)

    def _fail(
        self,
        attempt: PaymentAttempt,
        error: SettlementError,
    ) -> Result[PaymentRecord, SettlementError]:
        attempt.status = AttemptStatus.FAILED
        attempt.failure_reason = error.message
        self._error = error
        self._transition(CheckoutState.FAILED)
        logger.log(
            logging.WARNING if error.kind in _PROCESSOR_FAILURES else logging.INFO,
            "checkout: %s payment failed (%s): %s",
            attempt.method.value, error.kind.name, error.message,
        )
        return Error(error)

    def _succeed(
        self,
        attempt: PaymentAttempt,
        totals: OrderTotals,
    ) -> Result[PaymentRecord, SettlementError]:
        attempt.status = AttemptStatus.SUCCEEDED
        record = PaymentRecord(
            method=attempt.method,
            tip_amount=totals.tip_amount,
            total_amount=totals.total,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            discount_amount=totals.discount_amount,
            customer_name=self._customer_name,
            lines=self._frozen_lines,
            cash_received=attempt.cash_received,
            change_given=attempt.change_due,
            processor_reference=attempt.processor_reference,
            splits=attempt.splits,
        )
        self._record = record
        self._error = None
        self._is_open = False
        self._transition(CheckoutState.SETTLED)
        logger.info("checkout: settled %s %s", attempt.method.value, totals.total)
        if self._on_settled is not None:
            self._on_settled(record)
        return Ok(record)

    async def settle(self, timeout: float | None = None) -> Result[PaymentRecord, SettlementError]:
        """
        Run one settlement attempt with the current inputs.

        `timeout` overrides the policy's per-call processor deadline.
        A second call while an attempt is pending returns IN_FLIGHT and
        leaves the pending attempt alone.
        """
        if self._state.in_flight:
            logger.debug("checkout: settle ignored, attempt in flight")
            return Error(SettlementError(
                SettlementErrorKind.IN_FLIGHT,
                "A payment is already in progress",
            ))
        if not self._is_open or self._cart is None:
            return Error(SettlementError(SettlementErrorKind.NOT_OPEN, "Checkout is not open"))
        if self._cart.is_empty:
            return self._reject(SettlementError(SettlementErrorKind.VALIDATION, "Cart is empty"))
        if self._method is None:
            return self._reject(SettlementError(
                SettlementErrorKind.VALIDATION,
                "Select a payment method",
            ))

        # Totals are frozen here; later cart edits do not reach this attempt.
        self._transition(CheckoutState.VALIDATING)
        self._error = None
        totals = self.totals.rounded()
        self._frozen_lines = self._cart.lines
        method = self._method
        attempt = PaymentAttempt(method=method, requested_total=totals.total)
        self._attempt = attempt
        self._attempts.append(attempt)

        match method:
            case PaymentMethod.CASH:
                return self._settle_cash(attempt, totals)
            case PaymentMethod.SPLIT:
                attempt.splits = self._splits
                return self._fail(attempt, split_unavailable(totals.total, self._splits))
            case PaymentMethod.CARD:
                return await self._settle_card(attempt, totals, timeout)

    def _settle_cash(
        self,
        attempt: PaymentAttempt,
        totals: OrderTotals,
    ) -> Result[PaymentRecord, SettlementError]:
        match settle_cash(totals.total, self._cash_received):
            case Ok(outcome):
                attempt.cash_received = round_money(outcome.cash_received)
                attempt.change_due = round_money(outcome.change_due)
                return self._succeed(attempt, totals)
            case Error(e):
                return self._fail(attempt, e)

    async def _settle_card(
        self,
        attempt: PaymentAttempt,
        totals: OrderTotals,
        timeout: float | None,
    ) -> Result[PaymentRecord, SettlementError]:
        if self._processor is None:
            return self._fail(attempt, SettlementError(
                SettlementErrorKind.ADAPTER_UNAVAILABLE,
                "Card payments are not available: no payment processor configured",
            ))
        if self._card is None:
            return self._fail(attempt, SettlementError(
                SettlementErrorKind.VALIDATION,
                "Card details are required",
            ))

        seconds = timeout if timeout is not None else self._policy.timeout_seconds
        card_run = CardSettlement(self._processor, timeout_seconds=seconds)
        self._card_run = card_run
        self._transition(CheckoutState.AWAITING_CONFIRMATION)
        task = asyncio.create_task(card_run.run(totals.total, self._card, self._billing_name))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if self._state is CheckoutState.CANCELLED:
                return Error(SettlementError(SettlementErrorKind.CANCELLED, _CANCELLED_MESSAGE))
            # The caller of settle() was cancelled; the checkout goes with it.
            await self.cancel()
            raise
        finally:
            self._task = None

        match result:
            case Ok(confirmation):
                # A confirmed charge always settles; cancel() stands down once
                # the confirmation is in.
                self._card_run = None
                attempt.processor_reference = confirmation.reference
                return self._succeed(attempt, totals)
            case Error(_) if self._state is CheckoutState.CANCELLED:
                return Error(SettlementError(SettlementErrorKind.CANCELLED, _CANCELLED_MESSAGE))
            case Error(e):
                self._card_run = None
                return self._fail(attempt, e)

    # ═══════════════════════════════════════════════════════════════════════════
    # cancel()
    # ═══════════════════════════════════════════════════════════════════════════

    async def cancel(self) -> bool:
        """
        Cancel checkout from any state before SETTLED.

        Stops an in-flight card confirmation, abandons a created intent
        (best-effort) and notifies `on_cancel`. Returns False when there was
        nothing to cancel, or when the card charge is already confirmed and
        the pending `settle()` is about to record it.
        """
        if self._state in (CheckoutState.SETTLED, CheckoutState.CANCELLED):
            return False
        if not self._is_open and not self._state.in_flight:
            return False

        if _confirmed(self._task):
            logger.info("checkout: cancel ignored, card payment already confirmed")
            return False

        self._transition(CheckoutState.CANCELLED)
        self._is_open = False

        attempt = self._attempt
        if attempt is not None and not attempt.is_terminal:
            attempt.status = AttemptStatus.FAILED
            attempt.failure_reason = _CANCELLED_MESSAGE

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

        card_run, self._card_run = self._card_run, None
        intent_id = None
        abandoned = False
        if card_run is not None and card_run.intent is not None:
            intent_id = card_run.intent.intent_id
            _, failed = await card_run.abandon()
            abandoned = failed == 0

        logger.info("checkout: cancelled (intent=%s, abandoned=%s)", intent_id, abandoned)
        if self._on_cancel is not None:
            self._on_cancel(CancelNotice(intent_id=intent_id, abandoned=abandoned, attempt=attempt))
        return True


__all__ = ("OnSettled", "OnCancel", "CheckoutSession")
