"""
Settlement types — methods, states, attempts and outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tillflow._types import Money
from tillflow.cart import CartLine

# ═══════════════════════════════════════════════════════════════════════════════
# Method & State
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    SPLIT = "split"


class CheckoutState(Enum):
    """
    Checkout lifecycle.

        IDLE → METHOD_SELECTED → VALIDATING → AWAITING_CONFIRMATION (card)
             → SETTLED | FAILED | CANCELLED

    FAILED is not final: the operator may fix the input and settle again.
    """

    IDLE = auto()
    METHOD_SELECTED = auto()
    VALIDATING = auto()
    AWAITING_CONFIRMATION = auto()
    SETTLED = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def in_flight(self) -> bool:
        return self in (CheckoutState.VALIDATING, CheckoutState.AWAITING_CONFIRMATION)


class AttemptStatus(Enum):
    PENDING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Attempt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentSplit:
    """One portion of a split payment."""

    method: PaymentMethod
    amount: Money
    cash_received: Money | None = None
    change_given: Money | None = None
    processor_reference: str | None = None


@dataclass(slots=True)
class PaymentAttempt:
    """
    One try at settling the order.

    Note: mutated only by CheckoutSession; callers read it.
    """

    method: PaymentMethod
    requested_total: Money
    status: AttemptStatus = AttemptStatus.PENDING
    cash_received: Money | None = None
    change_due: Money | None = None
    processor_reference: str | None = None
    splits: tuple[PaymentSplit, ...] = ()
    failure_reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not AttemptStatus.PENDING


# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentRecord:
    """
    Finalized payment descriptor handed to the caller for persistence.

    All amounts are cent-rounded.
    """

    method: PaymentMethod
    tip_amount: Money
    total_amount: Money
    subtotal: Money
    tax_amount: Money
    discount_amount: Money
    customer_name: str
    lines: tuple[CartLine, ...]
    cash_received: Money | None = None
    change_given: Money | None = None
    processor_reference: str | None = None
    splits: tuple[PaymentSplit, ...] = ()

    def as_dict(self) -> dict[str, object]:
        """Flat row for a payments table (lines excluded)."""
        return {
            "payment_method": self.method.value,
            "amount": self.total_amount,
            "tip_amount": self.tip_amount,
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "discount_amount": self.discount_amount,
            "customer_name": self.customer_name,
            "cash_received": self.cash_received,
            "change_given": self.change_given,
            "stripe_payment_id": self.processor_reference,
            "status": "completed",
        }


@dataclass(frozen=True, slots=True)
class CancelNotice:
    """Sent to `on_cancel` so an externally-created intent can be abandoned."""

    intent_id: str | None
    abandoned: bool
    attempt: PaymentAttempt | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class SettlementErrorKind(Enum):
    """Kinds of settlement errors."""

    VALIDATION = auto()  # Missing method, empty cart, short cash, no card
    ADAPTER_UNAVAILABLE = auto()  # Processor not configured or unreachable
    PAYMENT_DECLINED = auto()  # Processor reported a non-success status
    TRANSPORT = auto()  # Processor call raised
    TIMEOUT = auto()  # Processor call exceeded its deadline
    INCOMPLETE_FEATURE = auto()  # Split payments
    CANCELLED = auto()  # Operator cancelled checkout
    IN_FLIGHT = auto()  # Settle pressed while an attempt is pending
    NOT_OPEN = auto()  # Session closed, settled or cancelled


_RETRYABLE = frozenset({
    SettlementErrorKind.VALIDATION,
    SettlementErrorKind.PAYMENT_DECLINED,
    SettlementErrorKind.TRANSPORT,
    SettlementErrorKind.TIMEOUT,
})


@dataclass(frozen=True, slots=True)
class SettlementError:
    kind: SettlementErrorKind
    message: str

    @property
    def retryable(self) -> bool:
        """Whether settling again in the same session can succeed."""
        return self.kind in _RETRYABLE

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "PaymentMethod",
    "CheckoutState",
    "AttemptStatus",
    "PaymentSplit",
    "PaymentAttempt",
    "PaymentRecord",
    "CancelNotice",
    "SettlementErrorKind",
    "SettlementError",
)
