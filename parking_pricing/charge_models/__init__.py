from .base import BaseChargeModel, ChargeModel, count_fractions
from .flat import FallbackChargeModel, MonthlyChargeModel
from .hourly import HourlyChargeModel
from .period import BiweeklyChargeModel, PeriodChargeModel, WeeklyChargeModel
from .registry import ChargeModelRegistry, build_default_registry, default_registry
from .windowed import DailyChargeModel, OvernightChargeModel, WindowedChargeModel

__all__ = [
    "BaseChargeModel",
    "ChargeModel",
    "count_fractions",
    "ChargeModelRegistry",
    "build_default_registry",
    "default_registry",
    "HourlyChargeModel",
    "WindowedChargeModel",
    "DailyChargeModel",
    "OvernightChargeModel",
    "PeriodChargeModel",
    "WeeklyChargeModel",
    "BiweeklyChargeModel",
    "MonthlyChargeModel",
    "FallbackChargeModel",
]
