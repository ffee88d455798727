# parking_pricing/store/rest.py
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import STORE_API_KEY, STORE_TIMEOUT, STORE_URL
from ..errors import DataAccessFailure
from ..pricing.normalize import normalize_text
from ..pricing.types import PricingRule, Rate, RateType, Threshold, TimeWindow

_LOGGER = logging.getLogger(__name__)


def _in_filter(values: Sequence[str]) -> str:
    # PostgREST membership filter; values are quoted so ids may contain commas
    quoted = ",".join('"{}"'.format(str(v).replace('"', '\\"')) for v in values)
    return f"in.({quoted})"


class HttpRateStore:
    """
    Rate store backed by a PostgREST-style REST endpoint (e.g. Supabase).

    Every read is a single GET with equality / membership filters:
      GET {base_url}/rate_time_windows?rate_id=eq.X&is_active=eq.true

    Transport errors, non-2xx responses and non-JSON bodies all surface as
    DataAccessFailure; there is no retry here, the calculation simply fails.
    """

    def __init__(
        self,
        base_url: str = STORE_URL,
        api_key: str = STORE_API_KEY,
        timeout: float = STORE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("HttpRateStore requires a base_url (PARKING_STORE_URL)")
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            transport=transport,
        )

    async def __aenter__(self) -> "HttpRateStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _select(self, table: str, params: Dict[str, str], operation: str) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}"
        query = {"select": "*", **params}
        _LOGGER.debug("%s: GET %s params=%s", operation, url, query)
        try:
            resp = await self._client.get(url, params=query)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as ex:
            raise DataAccessFailure(operation, str(ex)) from ex
        except ValueError as ex:
            raise DataAccessFailure(operation, f"invalid JSON body: {ex}") from ex

        if not isinstance(data, list):
            raise DataAccessFailure(operation, f"expected a JSON array from {table}")
        return data

    async def get_rate(self, rate_id: str) -> Optional[Rate]:
        rows = await self._select("rates", {"id": f"eq.{rate_id}"}, "get_rate")
        return Rate.from_record(rows[0]) if rows else None

    async def find_rate(self, vehicle_type: str, rate_type: RateType) -> Optional[Rate]:
        # Rate type labels are free text; filter by vehicle type remotely and by
        # parsed type locally.
        rows = await self._select("rates", {"vehicle_type": f"eq.{vehicle_type}"}, "find_rate")
        wanted = normalize_text(vehicle_type)
        for row in rows:
            rate = Rate.from_record(row)
            if rate.rate_type == rate_type and normalize_text(rate.vehicle_type) == wanted:
                return rate
        return None

    async def get_active_time_windows(self, rate_id: str) -> List[TimeWindow]:
        rows = await self._select(
            "rate_time_windows",
            {"rate_id": f"eq.{rate_id}", "is_active": "eq.true"},
            "get_active_time_windows",
        )
        return [TimeWindow.from_record(r) for r in rows]

    async def get_thresholds(self, source_rate_id: str) -> List[Threshold]:
        rows = await self._select(
            "rate_thresholds",
            {"source_rate_id": f"eq.{source_rate_id}", "order": "created_at.asc"},
            "get_thresholds",
        )
        return [Threshold.from_record(r) for r in rows]

    async def get_active_pricing_rules(self, rate_id: str) -> List[PricingRule]:
        rows = await self._select(
            "pricing_rules",
            {"rate_id": f"eq.{rate_id}", "is_active": "eq.true", "order": "priority.asc"},
            "get_active_pricing_rules",
        )
        return [PricingRule.from_record(r) for r in rows]

    async def get_rates_by_ids(self, rate_ids: Sequence[str]) -> List[Rate]:
        if not rate_ids:
            return []
        rows = await self._select("rates", {"id": _in_filter(rate_ids)}, "get_rates_by_ids")
        return [Rate.from_record(r) for r in rows]


__all__ = ["HttpRateStore"]
