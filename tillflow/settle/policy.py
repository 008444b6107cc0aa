"""
Checkout policy — defaults applied on every open.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from tillflow._types import parse_amount
from tillflow.tip import DEFAULT_TIP, DEFAULT_TIP_OPTIONS, PercentageTip, TipOption, TipSelection
from tillflow.settle._types import PaymentMethod

TIP_PERCENT_ENV = "TILLFLOW_DEFAULT_TIP_PERCENT"
TIMEOUT_ENV = "TILLFLOW_PROCESSOR_TIMEOUT"
METHOD_ENV = "TILLFLOW_DEFAULT_METHOD"


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    Checkout configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            CheckoutPolicy()
            .with_default_tip(PercentageTip(Decimal(18)))
            .with_default_method(PaymentMethod.CASH)
            .with_timeout(seconds=15)
        )

    Note: Immutable — each method returns new CheckoutPolicy.
    """

    default_tip: TipSelection = DEFAULT_TIP
    default_method: PaymentMethod = PaymentMethod.CARD
    tip_options: tuple[TipOption, ...] = DEFAULT_TIP_OPTIONS
    processor_timeout: timedelta = timedelta(seconds=30)

    @property
    def timeout_seconds(self) -> float:
        return self.processor_timeout.total_seconds()

    def with_default_tip(self, selection: TipSelection) -> CheckoutPolicy:
        return CheckoutPolicy(
            default_tip=selection,
            default_method=self.default_method,
            tip_options=self.tip_options,
            processor_timeout=self.processor_timeout,
        )

    def with_default_method(self, method: PaymentMethod) -> CheckoutPolicy:
        return CheckoutPolicy(
            default_tip=self.default_tip,
            default_method=method,
            tip_options=self.tip_options,
            processor_timeout=self.processor_timeout,
        )

    def with_tip_options(self, options: tuple[TipOption, ...]) -> CheckoutPolicy:
        return CheckoutPolicy(
            default_tip=self.default_tip,
            default_method=self.default_method,
            tip_options=tuple(options),
            processor_timeout=self.processor_timeout,
        )

    def with_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """
        Set the deadline for each processor call.

        Example:
            .with_timeout(seconds=10)
            .with_timeout(delta=timedelta(minutes=1))
        """
        if delta is None:
            if seconds is None:
                raise ValueError("Must provide seconds or delta")
            delta = timedelta(seconds=seconds)
        if delta <= timedelta(0):
            raise ValueError("Processor timeout must be positive")
        return CheckoutPolicy(
            default_tip=self.default_tip,
            default_method=self.default_method,
            tip_options=self.tip_options,
            processor_timeout=delta,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CheckoutPolicy:
        """
        Defaults overridden by TILLFLOW_* variables.

        Raises ValueError naming the variable when a value is unusable.
        """
        env = os.environ if environ is None else environ
        policy = cls()

        if raw := env.get(TIP_PERCENT_ENV, "").strip():
            pct = parse_amount(raw)
            if pct is None or pct < 0:
                raise ValueError(f"{TIP_PERCENT_ENV} must be a non-negative number, got {raw!r}")
            policy = policy.with_default_tip(PercentageTip(Decimal(pct)))

        if raw := env.get(TIMEOUT_ENV, "").strip():
            seconds = parse_amount(raw)
            if seconds is None or seconds <= 0:
                raise ValueError(f"{TIMEOUT_ENV} must be a positive number of seconds, got {raw!r}")
            policy = policy.with_timeout(seconds=float(seconds))

        if raw := env.get(METHOD_ENV, "").strip():
            try:
                method = PaymentMethod(raw.lower())
            except ValueError as e:
                choices = ", ".join(m.value for m in PaymentMethod)
                raise ValueError(f"{METHOD_ENV} must be one of {choices}, got {raw!r}") from e
            policy = policy.with_default_method(method)

        return policy


DEFAULT_POLICY = CheckoutPolicy()


__all__ = (
    "TIP_PERCENT_ENV",
    "TIMEOUT_ENV",
    "METHOD_ENV",
    "CheckoutPolicy",
    "DEFAULT_POLICY",
)
