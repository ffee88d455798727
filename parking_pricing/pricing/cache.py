from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Set

from .normalize import normalize_text
from .types import Rate

if TYPE_CHECKING:
    from .context import CalculationContext


def build_hourly_key(vehicle_type: str) -> str:
    """Vehicle types are compared normalized ("Motocicleta" == "motocicleta ")."""
    return normalize_text(vehicle_type)


@dataclass
class CalculationCache:
    """
    Memoization arena for ONE top-level price calculation.

    Created fresh by calculate_advanced_price and threaded explicitly through the
    nested threshold evaluations, so repeated lookups inside one call never hit the
    store twice while separate calls never see each other's data.
    """

    contexts: Dict[str, "CalculationContext"] = field(default_factory=dict)
    hourly_rates: Dict[str, Optional[Rate]] = field(default_factory=dict)
    # rate ids on the current evaluation path (cycle guard for thresholds)
    visiting: Set[str] = field(default_factory=set)

    def get_context(self, rate_id: str) -> Optional["CalculationContext"]:
        return self.contexts.get(rate_id)

    def set_context(self, rate_id: str, context: "CalculationContext") -> None:
        self.contexts[rate_id] = context

    def has_hourly_rate(self, vehicle_type: str) -> bool:
        return build_hourly_key(vehicle_type) in self.hourly_rates

    def get_hourly_rate(self, vehicle_type: str) -> Optional[Rate]:
        return self.hourly_rates.get(build_hourly_key(vehicle_type))

    def set_hourly_rate(self, vehicle_type: str, rate: Optional[Rate]) -> None:
        self.hourly_rates[build_hourly_key(vehicle_type)] = rate

    def is_visiting(self, rate_id: str) -> bool:
        return rate_id in self.visiting

    @contextmanager
    def visit(self, rate_id: str) -> Iterator[None]:
        self.visiting.add(rate_id)
        try:
            yield
        finally:
            self.visiting.discard(rate_id)


__all__ = ["CalculationCache", "build_hourly_key"]
