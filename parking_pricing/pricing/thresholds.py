from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from .cache import CalculationCache
from .context import CalculationContext
from .result import ChargeCalculation, Suggestion

_LOGGER = logging.getLogger(__name__)


async def evaluate_thresholds(
    context: CalculationContext,
    base: ChargeCalculation,
    vehicle_type: str,
    entry: datetime,
    exit: datetime,
    cache: CalculationCache,
    store,
    options,
    trace=None,
) -> List[Suggestion]:
    """
    Price the target rate of every threshold the base total has reached.

    Thresholds pointing back at the base rate, at a rate that no longer exists,
    or at a rate already being evaluated further up the call path are skipped.
    Nested evaluations share ``cache`` and never auto-apply.
    """
    # engine imports this module
    from .engine import price_stay

    suggestions: List[Suggestion] = []
    current = base.total
    nested_options = options.for_alternative()

    for resolved in context.thresholds:
        threshold, target = resolved.threshold, resolved.target
        if target is None:
            _LOGGER.warning(
                "Threshold %s points to unknown rate %s; skipped", threshold.id, threshold.target_rate_id
            )
            continue
        if target.id == context.rate.id:
            continue
        if cache.is_visiting(target.id):
            _LOGGER.debug("Threshold %s: rate %s already on the evaluation path", threshold.id, target.id)
            continue
        if current < threshold.threshold_amount:
            continue

        nested = await price_stay(target, vehicle_type, entry, exit, nested_options, cache, store)
        target_price = nested.base_calculation.total
        suggestion = Suggestion(
            rate_id=target.id,
            rate_type=target.rate_type,
            threshold_amount=threshold.threshold_amount,
            target_price=target_price,
            current_price=current,
            savings=current - target_price,
            auto_apply=threshold.auto_apply,
            threshold_id=threshold.id,
            calculation=nested.base_calculation,
        )
        suggestions.append(suggestion)
        if trace is not None:
            trace.threshold_evaluated(context.rate.id, suggestion)

    return suggestions


def select_auto_apply(suggestions: List[Suggestion], base_total) -> Optional[Suggestion]:
    """Cheapest auto-apply suggestion strictly below the base total; ties keep evaluation order."""
    best: Optional[Suggestion] = None
    for s in suggestions:
        if not s.auto_apply or s.target_price >= base_total:
            continue
        if best is None or s.target_price < best.target_price:
            best = s
    return best


__all__ = ["evaluate_thresholds", "select_auto_apply"]
