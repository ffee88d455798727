from __future__ import annotations

from ..pricing.types import RateType
from .base import BaseChargeModel


class MonthlyChargeModel(BaseChargeModel):
    """Mensal: always the flat monthly value, whatever the stay."""

    rate_type = RateType.MONTHLY
    line_type = "monthly"
    label = "Monthly"


class FallbackChargeModel(BaseChargeModel):
    rate_type = RateType.FALLBACK
    line_type = "flat"
    label = "Flat charge"
