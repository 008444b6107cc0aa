"""
Split payment — accepted structurally, never settled.

Allocation across methods is not implemented, so this path fails closed:
the only outcome it can produce is an error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tillflow._types import Money, ZERO
from tillflow.settle._types import PaymentSplit, SettlementError, SettlementErrorKind

logger = logging.getLogger(__name__)

SPLIT_UNAVAILABLE = "Split payments are not available"


def allocated(splits: Sequence[PaymentSplit]) -> Money:
    return sum((s.amount for s in splits), ZERO)


def split_unavailable(total: Money, splits: Sequence[PaymentSplit]) -> SettlementError:
    if splits and allocated(splits) != total:
        logger.debug("split: %s allocated against total %s", allocated(splits), total)
    return SettlementError(SettlementErrorKind.INCOMPLETE_FEATURE, SPLIT_UNAVAILABLE)


__all__ = ("SPLIT_UNAVAILABLE", "allocated", "split_unavailable")
