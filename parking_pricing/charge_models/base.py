from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..pricing.context import CalculationContext
from ..pricing.normalize import quantize
from ..pricing.result import ChargeCalculation, ChargeLine
from ..pricing.types import Rate, RateConfig, RateType, TimeWindow


def count_fractions(minutes: int, courtesy_minutes: int) -> int:
    """
    Hour fractions billed for a stay of ``minutes``.

    Full hours count one fraction each, a sub-hour stay counts one, and the
    leftover minutes add one more fraction only when they exceed the courtesy.
    """
    if minutes <= 0:
        return 0
    fractions = minutes // 60
    if fractions == 0:
        fractions = 1
    remainder = minutes - fractions * 60
    if remainder > courtesy_minutes:
        fractions += 1
    return max(fractions, 1)


def rate_courtesy(rate: Rate) -> int:
    return rate.courtesy_minutes or RateConfig.parse(rate.config).courtesy_minutes or 0


class ChargeModel(Protocol):
    """A rate-type specific pricing algorithm."""

    rate_type: RateType

    def charge(
        self,
        context: CalculationContext,
        entry: datetime,
        exit: datetime,
        *,
        courtesy_override: Optional[int] = None,
    ) -> ChargeCalculation: ...


class BaseChargeModel:
    """Flat charge at ``rate.value`` plus helpers shared by the concrete models."""

    rate_type: RateType = RateType.FALLBACK
    line_type: str = "flat"
    label: str = "Flat charge"

    def charge(
        self,
        context: CalculationContext,
        entry: datetime,
        exit: datetime,
        *,
        courtesy_override: Optional[int] = None,
    ) -> ChargeCalculation:
        return self.calculation(context, [self.flat_line(context)])

    def calculation(self, context: CalculationContext, breakdown, extras=()) -> ChargeCalculation:
        return ChargeCalculation(
            rate_id=context.rate.id,
            rate_type=context.rate.rate_type,
            breakdown=list(breakdown),
            extras=list(extras),
        )

    def flat_line(self, context: CalculationContext, **fields) -> ChargeLine:
        rate = context.rate
        fields.setdefault("description", self.label)
        return ChargeLine(
            type=self.line_type,
            amount=rate.value,
            rate_id=rate.id,
            unit_value=rate.value,
            **fields,
        )

    def overflow_rate(self, context: CalculationContext, window: Optional[TimeWindow] = None) -> Rate:
        """window.extra_rate_id -> hourly fallback -> the rate itself."""
        if window is not None:
            extra = context.resolve_rate(window.extra_rate_id)
            if extra is not None:
                return extra
        return context.hourly_rate or context.rate

    def overflow_line(
        self,
        minutes: int,
        extra_rate: Rate,
        *,
        description: str,
        window_id: Optional[str] = None,
    ) -> Optional[ChargeLine]:
        if minutes <= 0:
            return None
        fractions = count_fractions(minutes, rate_courtesy(extra_rate))
        return ChargeLine(
            type=f"{self.line_type}_extra",
            description=description,
            amount=quantize(extra_rate.value * fractions),
            rate_id=extra_rate.id,
            unit_value=extra_rate.value,
            minutes=minutes,
            fractions=fractions,
            window_id=window_id,
        )
