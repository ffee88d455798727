from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..config import BIWEEKLY_PERIOD_DAYS, WEEKLY_PERIOD_DAYS
from ..pricing.context import CalculationContext
from ..pricing.result import ChargeCalculation
from ..pricing.types import RateType, WindowType
from ..pricing.windows import compute_period_limit, minutes_between
from .base import BaseChargeModel


class PeriodChargeModel(BaseChargeModel):
    """One flat charge per stay; minutes past the period allowance are billed hourly."""

    window_type: WindowType = WindowType.WEEKLY
    period_days: int = WEEKLY_PERIOD_DAYS

    def charge(
        self,
        context: CalculationContext,
        entry: datetime,
        exit: datetime,
        *,
        courtesy_override: Optional[int] = None,
    ) -> ChargeCalculation:
        windows = context.windows(self.window_type)
        window = windows[0] if windows else None
        allowance = compute_period_limit(window, self.period_days)
        minutes = minutes_between(entry, exit)

        breakdown = [
            self.flat_line(
                context,
                description=f"{self.label} ({allowance} min allowance)",
                minutes=min(minutes, allowance),
                window_id=window.id if window else None,
            )
        ]
        extras = []
        line = self.overflow_line(
            minutes - allowance,
            self.overflow_rate(context, window),
            description=f"Overtime beyond {self.label.lower()} allowance",
            window_id=window.id if window else None,
        )
        if line is not None:
            extras.append(line)
        return self.calculation(context, breakdown, extras)


class WeeklyChargeModel(PeriodChargeModel):
    rate_type = RateType.WEEKLY
    window_type = WindowType.WEEKLY
    period_days = WEEKLY_PERIOD_DAYS
    line_type = "weekly"
    label = "Weekly"


class BiweeklyChargeModel(PeriodChargeModel):
    rate_type = RateType.BIWEEKLY
    window_type = WindowType.BIWEEKLY
    period_days = BIWEEKLY_PERIOD_DAYS
    line_type = "biweekly"
    label = "Biweekly"
