from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..charge_models.registry import ChargeModelRegistry, default_registry
from .context import CalculationContext
from .result import ChargeCalculation


def price(
    context: CalculationContext,
    entry: datetime,
    exit: datetime,
    courtesy_override: Optional[int] = None,
    *,
    registry: Optional[ChargeModelRegistry] = None,
) -> ChargeCalculation:
    """Pure pricing of ``context.rate`` for the stay; no store access."""
    model = (registry or default_registry()).get(context.rate.rate_type)
    return model.charge(context, entry, exit, courtesy_override=courtesy_override)


__all__ = ["price"]
