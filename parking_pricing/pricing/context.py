from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .cache import CalculationCache, build_hourly_key
from .normalize import normalize_text
from .types import PricingRule, Rate, RateConfig, RateType, Threshold, TimeWindow, WindowType
from .windows import group_windows_by_type

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedThreshold:
    threshold: Threshold
    target: Optional[Rate]  # None when the target id no longer exists


@dataclass
class CalculationContext:
    """Everything needed to price one rate, fetched once per calculation."""

    rate: Rate
    config: RateConfig
    windows_by_type: Dict[WindowType, List[TimeWindow]]
    thresholds: List[ResolvedThreshold]
    related_rates: Dict[str, Rate]
    hourly_rate: Optional[Rate]
    pricing_rules: List[PricingRule]

    def windows(self, window_type: WindowType) -> List[TimeWindow]:
        return self.windows_by_type.get(window_type) or []

    def resolve_rate(self, rate_id: Optional[str]) -> Optional[Rate]:
        if not rate_id:
            return None
        if rate_id == self.rate.id:
            return self.rate
        return self.related_rates.get(rate_id)

    def courtesy_minutes(self, override: Optional[int] = None) -> int:
        """override -> rate column -> config.courtesyMinutes -> 0 (zero falls through)."""
        if override is not None:
            return max(int(override), 0)
        return self.rate.courtesy_minutes or self.config.courtesy_minutes or 0


def _related_rate_ids(rate: Rate, windows: List[TimeWindow], thresholds: List[Threshold]) -> List[str]:
    seen: Dict[str, None] = {}
    for w in windows:
        if w.extra_rate_id:
            seen.setdefault(w.extra_rate_id, None)
    for t in thresholds:
        if t.target_rate_id:
            seen.setdefault(t.target_rate_id, None)
    seen.pop(rate.id, None)
    return list(seen)


async def resolve_hourly_rate(
    vehicle_type: str,
    related_rates: Dict[str, Rate],
    cache: CalculationCache,
    store,
) -> Optional[Rate]:
    if cache.has_hourly_rate(vehicle_type):
        return cache.get_hourly_rate(vehicle_type)

    wanted = build_hourly_key(vehicle_type)
    hourly = next(
        (
            r
            for r in related_rates.values()
            if r.rate_type == RateType.HOURLY and normalize_text(r.vehicle_type) == wanted
        ),
        None,
    )
    if hourly is None:
        hourly = await store.find_rate(vehicle_type, RateType.HOURLY)

    if hourly is None:
        _LOGGER.debug("No hourly fallback rate for vehicle type %r", vehicle_type)
    cache.set_hourly_rate(vehicle_type, hourly)
    return hourly


async def build_context(
    rate: Rate,
    vehicle_type: str,
    cache: CalculationCache,
    store,
) -> CalculationContext:
    cached = cache.get_context(rate.id)
    if cached is not None:
        return cached

    windows, thresholds, rules = await asyncio.gather(
        store.get_active_time_windows(rate.id),
        store.get_thresholds(rate.id),
        store.get_active_pricing_rules(rate.id),
    )

    related: Dict[str, Rate] = {}
    related_ids = _related_rate_ids(rate, windows, thresholds)
    if related_ids:
        for r in await store.get_rates_by_ids(related_ids):
            related[r.id] = r
        missing = [i for i in related_ids if i not in related]
        if missing:
            _LOGGER.warning("Rate %s references unknown rates: %s", rate.id, ", ".join(missing))

    hourly = await resolve_hourly_rate(vehicle_type, related, cache, store)

    resolved = [
        ResolvedThreshold(threshold=t, target=(rate if t.target_rate_id == rate.id else related.get(t.target_rate_id)))
        for t in thresholds
    ]

    context = CalculationContext(
        rate=rate,
        config=RateConfig.parse(rate.config),
        windows_by_type=group_windows_by_type(windows),
        thresholds=resolved,
        related_rates=related,
        hourly_rate=hourly,
        pricing_rules=list(rules),
    )
    _LOGGER.debug(
        "Context for rate %s (%s): %d windows, %d thresholds, %d related rates, hourly=%s",
        rate.id,
        rate.rate_type.value,
        len(windows),
        len(resolved),
        len(related),
        hourly.id if hourly else None,
    )
    cache.set_context(rate.id, context)
    return context


__all__ = ["CalculationContext", "ResolvedThreshold", "build_context", "resolve_hourly_rate"]
