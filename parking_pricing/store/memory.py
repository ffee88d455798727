"""In-memory rate store, optionally loaded from a YAML/JSON fixture.

Fixture layout (YAML shown, JSON is the same shape)::

    rates:
      - {id: r-hour, vehicle_type: Carro, rate_type: Hora/Fração, value: 5, courtesy_minutes: 10}
    time_windows:
      - {id: w1, rate_id: r-day, window_type: daily, start_time: "08:00", end_time: "18:00"}
    thresholds:
      - {id: t1, source_rate_id: r-hour, target_rate_id: r-day, threshold_amount: 30}
    pricing_rules: []

The loader fails fast with ValueError on malformed fixtures.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..pricing.normalize import normalize_text
from ..pricing.types import PricingRule, Rate, RateType, Threshold, TimeWindow

_LOGGER = logging.getLogger(__name__)

TABLES = ("rates", "time_windows", "thresholds", "pricing_rules")


class InMemoryRateStore:
    def __init__(
        self,
        rates: Iterable[Rate] = (),
        time_windows: Iterable[TimeWindow] = (),
        thresholds: Iterable[Threshold] = (),
        pricing_rules: Iterable[PricingRule] = (),
    ):
        self.rates: Dict[str, Rate] = {r.id: r for r in rates}
        self.time_windows: List[TimeWindow] = list(time_windows)
        self.thresholds: List[Threshold] = list(thresholds)
        self.pricing_rules: List[PricingRule] = list(pricing_rules)
        # (operation, argument) per read, so callers can audit store traffic
        self.reads: List[Tuple[str, Any]] = []

    @classmethod
    def from_records(cls, data: Mapping[str, Any]) -> "InMemoryRateStore":
        unknown = set(data.keys()) - set(TABLES)
        if unknown:
            _LOGGER.warning("Ignoring unknown store tables: %s", ", ".join(sorted(unknown)))
        return cls(
            rates=[Rate.from_record(r) for r in _as_list(data.get("rates"), "rates")],
            time_windows=[TimeWindow.from_record(r) for r in _as_list(data.get("time_windows"), "time_windows")],
            thresholds=[Threshold.from_record(r) for r in _as_list(data.get("thresholds"), "thresholds")],
            pricing_rules=[PricingRule.from_record(r) for r in _as_list(data.get("pricing_rules"), "pricing_rules")],
        )

    def read_count(self, operation: str) -> int:
        return sum(1 for op, _ in self.reads if op == operation)

    async def get_rate(self, rate_id: str) -> Optional[Rate]:
        self.reads.append(("get_rate", rate_id))
        return self.rates.get(rate_id)

    async def find_rate(self, vehicle_type: str, rate_type: RateType) -> Optional[Rate]:
        self.reads.append(("find_rate", (vehicle_type, rate_type)))
        wanted = normalize_text(vehicle_type)
        for r in self.rates.values():
            if r.rate_type == rate_type and normalize_text(r.vehicle_type) == wanted:
                return r
        return None

    async def get_active_time_windows(self, rate_id: str) -> List[TimeWindow]:
        self.reads.append(("get_active_time_windows", rate_id))
        return [w for w in self.time_windows if w.rate_id == rate_id and w.is_active]

    async def get_thresholds(self, source_rate_id: str) -> List[Threshold]:
        self.reads.append(("get_thresholds", source_rate_id))
        return [t for t in self.thresholds if t.source_rate_id == source_rate_id]

    async def get_active_pricing_rules(self, rate_id: str) -> List[PricingRule]:
        self.reads.append(("get_active_pricing_rules", rate_id))
        rules = [p for p in self.pricing_rules if p.rate_id == rate_id and p.is_active]
        return sorted(rules, key=lambda p: p.priority)

    async def get_rates_by_ids(self, rate_ids: Sequence[str]) -> List[Rate]:
        self.reads.append(("get_rates_by_ids", tuple(rate_ids)))
        return [self.rates[i] for i in rate_ids if i in self.rates]


def _as_list(x: Any, table: str) -> List[Mapping[str, Any]]:
    if x is None:
        return []
    if not isinstance(x, list):
        raise ValueError(f"Store table '{table}' must be a list")
    for i, row in enumerate(x):
        if not isinstance(row, dict):
            raise ValueError(f"Row {i} of store table '{table}' must be a mapping")
    return x


def _load_one(path: Path) -> Dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(raw) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Top-level YAML must be a mapping in {path}")
        return data
    if path.suffix.lower() == ".json":
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Top-level JSON must be an object in {path}")
        return data
    raise ValueError(f"Unsupported store file type: {path}")


def load_store_file(path: Path | str) -> InMemoryRateStore:
    p = Path(path)
    store = InMemoryRateStore.from_records(_load_one(p))
    _LOGGER.info(
        "Loaded store file %s (%d rates, %d windows, %d thresholds)",
        p,
        len(store.rates),
        len(store.time_windows),
        len(store.thresholds),
    )
    return store


__all__ = ["InMemoryRateStore", "load_store_file"]
