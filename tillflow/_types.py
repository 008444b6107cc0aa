"""
Core types for tillflow.

Re-exports from kungfu/combinators + money helpers shared by every layer.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# Re-export from combinators
from combinators import LCR, NoError

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Exact monetary amount. Rounded only at the boundary (see round_money)."""

type MoneyLike = Decimal | int | str
"""Inputs accepted by to_money(). Floats are deliberately absent."""

ZERO: Money = Decimal("0")
CENT = Decimal("0.01")


class MoneyError(ValueError):
    """Raised when a value cannot be represented exactly as money."""


def to_money(value: MoneyLike) -> Money:
    """
    Convert value to an exact Decimal.

    Floats are rejected: 0.1 + 0.2 must never reach a till.

    Example:
        to_money("4.50")   # Decimal("4.50")
        to_money(3)        # Decimal("3")
        to_money(4.5)      # MoneyError
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise MoneyError(f"Refusing inexact money value: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as e:
            raise MoneyError(f"Not a money amount: {value!r}") from e
    else:
        raise MoneyError(f"Unsupported money type: {type(value).__name__}")

    if not amount.is_finite():
        raise MoneyError(f"Money must be finite: {value!r}")
    return amount


def parse_amount(text: object) -> Money | None:
    """
    Parse user-typed amount text.

    Returns None for blank, malformed or non-finite input. Never raises.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, Decimal):
        return text if text.is_finite() else None
    if isinstance(text, (int, float)):
        text = repr(text)
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def round_money(value: Money) -> Money:
    """Quantize to cents with banker's rounding (half-to-even)."""
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def format_money(value: Money) -> str:
    """
    Render as USD.

    Example:
        format_money(Decimal("1234.5"))  # "$1,234.50"
        format_money(Decimal("-0.5"))    # "-$0.50"
    """
    rounded = round_money(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"


def to_cents(value: Money) -> int:
    """Rounded amount in integer cents (processor wire format)."""
    return int(round_money(value) * 100)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Re-exports from combinators
    "LCR",
    "NoError",
    # Money
    "Money",
    "MoneyLike",
    "MoneyError",
    "ZERO",
    "CENT",
    "to_money",
    "parse_amount",
    "round_money",
    "format_money",
    "to_cents",
)
