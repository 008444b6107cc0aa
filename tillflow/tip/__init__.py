"""
Tip — selection policy applied to the subtotal.

    from tillflow import tip as T

    T.resolve_tip(T.PercentageTip(Decimal(20)), Decimal("50.00"))  # 10.00
    T.resolve_tip(T.CustomTip("-3"), Decimal("50.00"))             # 0

    state = T.TipState()
    state.enter_custom("5")
    state.select(T.NoTip())      # custom amount is forgotten
"""

from __future__ import annotations

from tillflow.tip._types import (
    PercentageTip,
    CustomTip,
    NoTip,
    TipSelection,
    TipOption,
    percent,
    DEFAULT_TIP_OPTIONS,
    DEFAULT_TIP,
)
from tillflow.tip._resolve import resolve_tip, TipState

__all__ = (
    "PercentageTip",
    "CustomTip",
    "NoTip",
    "TipSelection",
    "TipOption",
    "percent",
    "DEFAULT_TIP_OPTIONS",
    "DEFAULT_TIP",
    "resolve_tip",
    "TipState",
)
