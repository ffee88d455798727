# parking_pricing/pricing/engine.py
"""
Public entry point of the pricing engine.

calculate_advanced_price:
- parses the ticket entry and the exit into timestamps
- prices the caller's rate (charge_models registry)
- evaluates upgrade thresholds, recursively pricing the target rates
- optionally switches to the cheapest auto-apply alternative

A fresh CalculationCache is created for every call and discarded afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from ..config import DEFAULT_TIME
from ..errors import InvalidTemporalRange, UnparseableDateTime
from .cache import CalculationCache
from .calculator import price
from .context import build_context
from .result import AppliedRate, AutoApplied, Duration, PriceResult
from .thresholds import evaluate_thresholds, select_auto_apply
from .types import Rate, Ticket

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingOptions:
    # overrides the rate's courtesy allowance for hourly fractions
    courtesy_minutes: Optional[int] = None
    # False keeps suggestions but never switches the billed rate
    auto_apply: bool = True

    def for_alternative(self) -> "PricingOptions":
        return replace(self, auto_apply=False)


def parse_moment(date_value: Any, time_value: Any) -> datetime:
    """'2024-01-01' + '08:00' -> datetime. Missing time is midnight; 'HH:MM' gets ':00'."""
    if isinstance(date_value, datetime):
        date_value = date_value.date()
    if isinstance(date_value, date):
        date_value = date_value.isoformat()

    time_text = DEFAULT_TIME if time_value in (None, "") else str(time_value).strip()
    if len(time_text) == 5:
        time_text = f"{time_text}:00"
    try:
        return datetime.strptime(f"{str(date_value).strip()}T{time_text}", "%Y-%m-%dT%H:%M:%S")
    except (TypeError, ValueError):
        raise UnparseableDateTime(date_value, time_value)


async def price_stay(
    rate: Rate,
    vehicle_type: str,
    entry: datetime,
    exit: datetime,
    options: PricingOptions,
    cache: CalculationCache,
    store,
    trace=None,
) -> PriceResult:
    """Price one rate for an already validated stay, sharing ``cache`` with the caller."""
    with cache.visit(rate.id):
        context = await build_context(rate, vehicle_type, cache, store)
        if trace is not None:
            trace.context_built(context)

        base = price(context, entry, exit, courtesy_override=options.courtesy_minutes)
        if trace is not None:
            trace.base_priced(base)

        suggestions = await evaluate_thresholds(
            context, base, vehicle_type, entry, exit, cache, store, options, trace
        )

    applied = base
    auto_applied = None
    if options.auto_apply:
        chosen = select_auto_apply(suggestions, base.total)
        if chosen is not None and chosen.calculation is not None:
            applied = chosen.calculation
            auto_applied = AutoApplied(from_rate_id=rate.id, to_rate_id=chosen.rate_id)
            _LOGGER.info(
                "Auto-applied rate %s instead of %s (%s -> %s)",
                chosen.rate_id,
                rate.id,
                base.total,
                chosen.target_price,
            )
            if trace is not None:
                trace.auto_applied(auto_applied)

    return PriceResult(
        price=applied.total,
        duration=Duration.between(entry, exit),
        breakdown=list(applied.breakdown),
        extras=list(applied.extras),
        applied_rate=AppliedRate(id=applied.rate_id, type=applied.rate_type),
        suggestions=suggestions,
        auto_applied=auto_applied,
        base_calculation=base,
    )


async def calculate_advanced_price(
    ticket: Union[Ticket, Mapping[str, Any]],
    rate: Union[Rate, Mapping[str, Any]],
    exit_date: Any,
    exit_time: Any,
    options: Optional[PricingOptions] = None,
    *,
    store,
    trace=None,
) -> PriceResult:
    if not isinstance(ticket, Ticket):
        ticket = Ticket.from_record(ticket)
    if not isinstance(rate, Rate):
        rate = Rate.from_record(rate)
    options = options or PricingOptions()

    entry = parse_moment(ticket.entry_date, ticket.entry_time)
    exit = parse_moment(exit_date, exit_time)
    if exit <= entry:
        raise InvalidTemporalRange(entry, exit)

    _LOGGER.debug(
        "Pricing rate %s (%s) for %s from %s to %s",
        rate.id,
        rate.rate_type.value,
        ticket.vehicle_type,
        entry,
        exit,
    )
    cache = CalculationCache()
    result = await price_stay(rate, ticket.vehicle_type, entry, exit, options, cache, store, trace)
    if trace is not None:
        trace.result(rate.id, result)
    return result


__all__ = ["PricingOptions", "parse_moment", "price_stay", "calculate_advanced_price"]
