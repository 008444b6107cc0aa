"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from decimal import Decimal

from tillflow.pricing import Modifier, Product


# Catalog
SMALL = Modifier("size:small", "Small", "size", Decimal("0"))
LARGE = Modifier("size:large", "Large", "size", Decimal("1.00"))
OAT = Modifier("milk:oat", "Oat Milk", "milk", Decimal("0.60"))
SHOT = Modifier("extra:shot", "Extra Shot", "extra", Decimal("0.75"))

LATTE = Product("latte", "Latte", Decimal("4.00"), (SMALL, LARGE, OAT, SHOT))
CROISSANT = Product("croissant", "Croissant", Decimal("3.25"), allows_modifications=False)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)-7s %(name)s: %(message)s")
    asyncio.run(main())
