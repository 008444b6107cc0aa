"""
Tip selection types — closed set of variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tillflow._types import Money

# ═══════════════════════════════════════════════════════════════════════════════
# Selection Variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PercentageTip:
    """Percent of the subtotal. Follows the subtotal as the cart changes."""

    value: Money


@dataclass(frozen=True, slots=True)
class CustomTip:
    """
    Fixed amount typed by the operator.

    Note: amount may be raw text straight from the input box;
    blank, malformed or negative input resolves to 0.
    """

    amount: Money | str | None = None


@dataclass(frozen=True, slots=True)
class NoTip:
    pass


type TipSelection = PercentageTip | CustomTip | NoTip


# ═══════════════════════════════════════════════════════════════════════════════
# Preset Options
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TipOption:
    """A button on the tip row."""

    label: str
    selection: TipSelection


def percent(value: int | str) -> TipOption:
    return TipOption(f"{value}%", PercentageTip(Decimal(value)))


DEFAULT_TIP_OPTIONS: tuple[TipOption, ...] = (
    percent(15),
    percent(18),
    percent(20),
    percent(25),
    TipOption("Custom", CustomTip()),
    TipOption("No Tip", NoTip()),
)

DEFAULT_TIP: TipSelection = PercentageTip(Decimal(20))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "PercentageTip",
    "CustomTip",
    "NoTip",
    "TipSelection",
    "TipOption",
    "percent",
    "DEFAULT_TIP_OPTIONS",
    "DEFAULT_TIP",
)
