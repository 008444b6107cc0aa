"""
tillflow — order pricing and checkout settlement for a point-of-sale till.

    from tillflow import pricing as P    # Modifier pricing, catalog parsing
    from tillflow import cart as K       # Cart lines and order totals
    from tillflow import tip as T        # Tip selection
    from tillflow import settle as S     # Checkout state machine
    from tillflow import processor as X  # Card processor adapters
"""

from tillflow import pricing
from tillflow import cart
from tillflow import tip
from tillflow import processor
from tillflow import settle
from tillflow._types import (
    Money,
    MoneyLike,
    MoneyError,
    ZERO,
    to_money,
    parse_amount,
    round_money,
    format_money,
    to_cents,
    LCR,
    NoError,
)

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "cart",
    "tip",
    "processor",
    "settle",
    "Money",
    "MoneyLike",
    "MoneyError",
    "ZERO",
    "to_money",
    "parse_amount",
    "round_money",
    "format_money",
    "to_cents",
    "LCR",
    "NoError",
)
