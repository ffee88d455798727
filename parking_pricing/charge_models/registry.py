from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict

from ..pricing.types import RateType
from .base import ChargeModel
from .flat import FallbackChargeModel, MonthlyChargeModel
from .hourly import HourlyChargeModel
from .period import BiweeklyChargeModel, WeeklyChargeModel
from .windowed import DailyChargeModel, OvernightChargeModel


@dataclass
class ChargeModelRegistry:
    """Lookup table for charge models by rate type."""

    models: Dict[RateType, ChargeModel] = field(default_factory=dict)
    fallback: ChargeModel = field(default_factory=FallbackChargeModel)

    def register(self, rate_type: RateType, model: ChargeModel) -> None:
        self.models[rate_type] = model

    def get(self, rate_type: RateType) -> ChargeModel:
        return self.models.get(rate_type, self.fallback)


def build_default_registry() -> ChargeModelRegistry:
    reg = ChargeModelRegistry()
    reg.register(RateType.HOURLY, HourlyChargeModel())
    reg.register(RateType.DAILY, DailyChargeModel())
    reg.register(RateType.OVERNIGHT, OvernightChargeModel())
    reg.register(RateType.WEEKLY, WeeklyChargeModel())
    reg.register(RateType.BIWEEKLY, BiweeklyChargeModel())
    reg.register(RateType.MONTHLY, MonthlyChargeModel())
    return reg


@lru_cache(maxsize=1)
def default_registry() -> ChargeModelRegistry:
    # models hold no per-call state
    return build_default_registry()
