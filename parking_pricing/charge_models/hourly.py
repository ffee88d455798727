from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..pricing.context import CalculationContext
from ..pricing.normalize import quantize
from ..pricing.result import ChargeCalculation, ChargeLine
from ..pricing.types import RateType
from ..pricing.windows import minutes_between
from .base import BaseChargeModel, count_fractions


class HourlyChargeModel(BaseChargeModel):
    """Hora/Fração: every started hour past the courtesy allowance is one fraction."""

    rate_type = RateType.HOURLY
    line_type = "hourly"

    def charge(
        self,
        context: CalculationContext,
        entry: datetime,
        exit: datetime,
        *,
        courtesy_override: Optional[int] = None,
    ) -> ChargeCalculation:
        rate = context.rate
        minutes = minutes_between(entry, exit)
        courtesy = context.courtesy_minutes(courtesy_override)

        fractions = count_fractions(minutes, courtesy)
        if exit > entry:
            # sub-minute stays still pay one fraction
            fractions = max(fractions, 1)

        line = ChargeLine(
            type=self.line_type,
            description=f"{fractions} x hour fraction",
            amount=quantize(rate.value * fractions),
            rate_id=rate.id,
            unit_value=rate.value,
            minutes=minutes,
            fractions=fractions,
        )
        return self.calculation(context, [line])
