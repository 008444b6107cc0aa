"""
Cash reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import Result, Ok, Error

from tillflow._types import Money, ZERO, parse_amount, format_money
from tillflow.settle._types import SettlementError, SettlementErrorKind


@dataclass(frozen=True, slots=True)
class CashOutcome:
    cash_received: Money
    change_due: Money


def change_for(total: Money, cash_received: Money) -> Money:
    return max(cash_received - total, ZERO)


def settle_cash(total: Money, cash_received: object) -> Result[CashOutcome, SettlementError]:
    """
    Reconcile tendered cash against the total.

        settle_cash(Decimal("10.00"), "15")    # Ok(change_due=5.00)
        settle_cash(Decimal("10.00"), "9.99")  # Error(insufficient funds)
    """
    received = parse_amount(cash_received)
    if received is None:
        return Error(SettlementError(
            SettlementErrorKind.VALIDATION,
            "Cash received is required",
        ))
    if received < 0:
        return Error(SettlementError(
            SettlementErrorKind.VALIDATION,
            "Cash received cannot be negative",
        ))
    if received < total:
        return Error(SettlementError(
            SettlementErrorKind.VALIDATION,
            f"Insufficient funds: received {format_money(received)}, "
            f"total is {format_money(total)}",
        ))
    return Ok(CashOutcome(cash_received=received, change_due=change_for(total, received)))


__all__ = ("CashOutcome", "change_for", "settle_cash")
