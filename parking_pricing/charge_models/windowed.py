from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from ..config import MINUTES_PER_DAY
from ..pricing.context import CalculationContext
from ..pricing.normalize import quantize
from ..pricing.result import ChargeCalculation, ChargeLine
from ..pricing.types import RateType, TimeWindow, WindowType
from ..pricing.windows import day_start, iter_days, materialize_window, minutes_between, minutes_overlap
from .base import BaseChargeModel

# (window, materialized start, materialized end)
Match = Tuple[TimeWindow, datetime, datetime]


class WindowedChargeModel(BaseChargeModel):
    """
    Flat charge per calendar day covered by a recurring time window.

    For every day from the entry day to the exit day, the first window whose
    materialized interval overlaps the stay is charged once. The entry day is
    always charged (a default "standard window" line when nothing matched).
    Time outside the matched windows is billed by ``overflow_lines``.
    """

    window_type: WindowType = WindowType.DAILY
    # overflow uses the window's own extra rate before the hourly fallback
    use_window_extra_rate: bool = False

    def charge(
        self,
        context: CalculationContext,
        entry: datetime,
        exit: datetime,
        *,
        courtesy_override: Optional[int] = None,
    ) -> ChargeCalculation:
        windows = context.windows(self.window_type)
        if not windows:
            return self.charge_without_windows(context, entry, exit)

        breakdown: List[ChargeLine] = []
        matches: List[Match] = []
        entry_day = day_start(entry)

        for day in iter_days(entry, exit):
            matched = self._first_overlapping(windows, day, entry, exit)
            if matched is not None:
                window, start, end = matched
                breakdown.append(
                    self.flat_line(
                        context,
                        description=f"{self.label} {day:%Y-%m-%d} {start:%H:%M}-{end:%H:%M}",
                        window_id=window.id,
                        day=day.date(),
                        start=start,
                        end=end,
                    )
                )
                matches.append(matched)
            elif day == entry_day:
                breakdown.append(
                    self.flat_line(
                        context,
                        description=f"{self.label} {day:%Y-%m-%d} standard window",
                        day=day.date(),
                    )
                )

        return self.calculation(context, breakdown, self.overflow_lines(context, matches, exit))

    def overflow_lines(self, context: CalculationContext, matches: List[Match], exit: datetime) -> List[ChargeLine]:
        """Stay past the last matched window, billed only on that window's end day."""
        if not matches:
            return []
        window, _, end = matches[-1]
        if exit <= end or exit.date() != end.date():
            return []
        return self._overflow(context, window, end, exit)

    def _overflow(self, context: CalculationContext, window: TimeWindow, end: datetime, until: datetime) -> List[ChargeLine]:
        extra_rate = self.overflow_rate(context, window if self.use_window_extra_rate else None)
        line = self.overflow_line(
            minutes_between(end, until),
            extra_rate,
            description=f"Overtime {end:%Y-%m-%d %H:%M}-{until:%H:%M}",
            window_id=window.id,
        )
        return [line] if line is not None else []

    @staticmethod
    def _first_overlapping(
        windows: List[TimeWindow], day: datetime, entry: datetime, exit: datetime
    ) -> Optional[Match]:
        for w in windows:
            start, end = materialize_window(w, day)
            if minutes_overlap(entry, exit, start, end) > 0:
                return w, start, end
        return None

    def charge_without_windows(
        self, context: CalculationContext, entry: datetime, exit: datetime
    ) -> ChargeCalculation:
        return self.calculation(context, [self.flat_line(context)])


class DailyChargeModel(WindowedChargeModel):
    rate_type = RateType.DAILY
    window_type = WindowType.DAILY
    line_type = "daily"
    label = "Daily"

    def charge_without_windows(
        self, context: CalculationContext, entry: datetime, exit: datetime
    ) -> ChargeCalculation:
        minutes = minutes_between(entry, exit)
        days = max(-(-minutes // MINUTES_PER_DAY), 1)
        rate = context.rate
        line = ChargeLine(
            type=self.line_type,
            description=f"{days} x day",
            amount=quantize(rate.value * days),
            rate_id=rate.id,
            unit_value=rate.value,
            minutes=minutes,
            days=days,
        )
        return self.calculation(context, [line])


class OvernightChargeModel(WindowedChargeModel):
    """
    Pernoite: one charge per night, and the daytime between nights is overtime.

    Each matched window's overflow runs from its end to the earlier of the exit
    and the next matched window's start.
    """

    rate_type = RateType.OVERNIGHT
    window_type = WindowType.OVERNIGHT
    line_type = "overnight"
    label = "Overnight"
    use_window_extra_rate = True

    def overflow_lines(self, context: CalculationContext, matches: List[Match], exit: datetime) -> List[ChargeLine]:
        extras: List[ChargeLine] = []
        for i, (window, _, end) in enumerate(matches):
            until = exit
            if i + 1 < len(matches):
                until = min(exit, matches[i + 1][1])
            if until > end:
                extras.extend(self._overflow(context, window, end, until))
        return extras


__all__ = ["WindowedChargeModel", "DailyChargeModel", "OvernightChargeModel"]
