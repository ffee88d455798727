from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from ..pricing.types import PricingRule, Rate, RateType, Threshold, TimeWindow


class RateStore(Protocol):
    """Read-only view of the rate configuration tables.

    Implementations raise DataAccessFailure when a read fails; the engine lets it
    propagate unchanged.
    """

    async def get_rate(self, rate_id: str) -> Optional[Rate]: ...

    async def find_rate(self, vehicle_type: str, rate_type: RateType) -> Optional[Rate]: ...

    async def get_active_time_windows(self, rate_id: str) -> List[TimeWindow]: ...

    async def get_thresholds(self, source_rate_id: str) -> List[Threshold]: ...

    async def get_active_pricing_rules(self, rate_id: str) -> List[PricingRule]: ...

    async def get_rates_by_ids(self, rate_ids: Sequence[str]) -> List[Rate]: ...
