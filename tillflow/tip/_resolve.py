"""
Tip resolution.
"""

from __future__ import annotations

import logging

from tillflow._types import Money, ZERO, parse_amount
from tillflow.tip._types import (
    TipSelection,
    PercentageTip,
    CustomTip,
    NoTip,
    DEFAULT_TIP,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# resolve_tip()
# ═══════════════════════════════════════════════════════════════════════════════


def resolve_tip(selection: TipSelection | None, subtotal: Money) -> Money:
    """
    Tip amount for a selection. Never negative, never raises.

        PercentageTip(20), subtotal 50.00  → 10.00
        CustomTip("abc")                   → 0
        NoTip()                            → 0
    """
    match selection:
        case PercentageTip(value=value):
            pct = parse_amount(value)
            if pct is None or pct <= 0 or subtotal <= 0:
                return ZERO
            return subtotal * pct / 100
        case CustomTip(amount=amount):
            parsed = parse_amount(amount)
            if parsed is None or parsed < 0:
                if amount not in (None, ""):
                    logger.debug("tip: ignoring custom amount %r", amount)
                return ZERO
            return parsed
        case NoTip() | None:
            return ZERO
        case _:
            return ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# TipState — Per-Session Selection Holder
# ═══════════════════════════════════════════════════════════════════════════════


class TipState:
    """
    Operator's tip choice for one checkout session.

    - percentage tips follow the live subtotal
    - a custom amount stays fixed until re-entered or the selection changes
    - switching away from Custom forgets the typed amount; coming back
      starts from empty again
    """

    def __init__(self, default: TipSelection = DEFAULT_TIP) -> None:
        self._default = default
        self._selection: TipSelection = default

    @property
    def selection(self) -> TipSelection:
        return self._selection

    @property
    def custom_amount(self) -> Money | str | None:
        match self._selection:
            case CustomTip(amount=amount):
                return amount
            case _:
                return None

    def reset(self) -> None:
        self._selection = self._default

    def select(self, selection: TipSelection) -> None:
        # A bare CustomTip() never inherits an earlier amount.
        self._selection = selection

    def enter_custom(self, text: Money | str | None) -> None:
        """Type into the custom box (implies the Custom selection)."""
        self._selection = CustomTip(text)

    def amount_for(self, subtotal: Money) -> Money:
        return resolve_tip(self._selection, subtotal)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("resolve_tip", "TipState")
