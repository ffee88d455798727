"""Records read from the rate configuration store.

Store rows arrive as loose mappings (snake_case from the database, camelCase from
the admin API). Each record is parsed once here into a frozen dataclass, and the
bilingual rate/window labels are classified into closed enums at the same time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .normalize import contains_any, normalize_text, to_money, to_optional_int

_LOGGER = logging.getLogger(__name__)


class RateType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    OVERNIGHT = "overnight"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    FALLBACK = "fallback"

    @classmethod
    def parse(cls, label: Any) -> "RateType":
        if isinstance(label, cls):
            return label
        norm = normalize_text(label)
        for rate_type, tokens in _RATE_TYPE_TOKENS:
            if contains_any(norm, tokens):
                return rate_type
        return cls.FALLBACK


class WindowType(str, Enum):
    DAILY = "daily"
    OVERNIGHT = "overnight"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"

    @classmethod
    def parse(cls, label: Any) -> Optional["WindowType"]:
        if isinstance(label, cls):
            return label
        norm = normalize_text(label)
        for window_type, tokens in _WINDOW_TYPE_TOKENS:
            if contains_any(norm, tokens):
                return window_type
        return None


# Order matters: "biweekly" contains "weekly", and hourly goes last so that
# labels like "Diaria 24 horas" keep their specific type.
_RATE_TYPE_TOKENS = (
    (RateType.DAILY, ("diaria", "daily")),
    (RateType.OVERNIGHT, ("pernoite", "overnight")),
    (RateType.BIWEEKLY, ("quinzenal", "biweekly")),
    (RateType.WEEKLY, ("semanal", "weekly")),
    (RateType.MONTHLY, ("mensal", "monthly")),
    (RateType.HOURLY, ("hora", "hour", "fracao")),
)

_WINDOW_TYPE_TOKENS = (
    (WindowType.DAILY, ("diaria", "daily")),
    (WindowType.OVERNIGHT, ("pernoite", "overnight")),
    (WindowType.BIWEEKLY, ("quinzenal", "biweekly")),
    (WindowType.WEEKLY, ("semanal", "weekly")),
)


def _get(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        v = record.get(k)
        if v is not None:
            return v
    return default


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return normalize_text(value) not in ("false", "0", "no", "")
    return bool(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_time_of_day(value: Any, *, field: str = "time") -> Optional[timedelta]:
    """'08:00' / '08:00:00' -> timedelta offset from midnight. None/'' -> None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    parts = text.split(":")
    try:
        if len(parts) not in (2, 3):
            raise ValueError(text)
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(float(parts[2])) if len(parts) == 3 else 0
    except ValueError:
        raise ValueError(f"Invalid time of day for '{field}': {value!r}")
    if not (0 <= hours <= 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        raise ValueError(f"Invalid time of day for '{field}': {value!r}")
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


@dataclass(frozen=True)
class RateConfig:
    """Parsed view of the free-form ``rate.config`` column."""

    courtesy_minutes: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, value: Any) -> "RateConfig":
        data: Any = value
        if isinstance(value, (str, bytes)):
            text = value.decode("utf-8", "replace") if isinstance(value, bytes) else value
            if not text.strip():
                data = {}
            else:
                try:
                    data = json.loads(text)
                except ValueError as ex:
                    # A half-configured rate must still price with defaults.
                    _LOGGER.warning("Ignoring malformed rate config JSON: %s", ex)
                    data = {}
        if not isinstance(data, dict):
            data = {}

        courtesy = _get(data, "courtesyMinutes", "courtesy_minutes")
        try:
            courtesy_i = int(courtesy) if courtesy not in (None, "") else None
        except (TypeError, ValueError):
            _LOGGER.warning("Ignoring non-numeric courtesyMinutes in rate config: %r", courtesy)
            courtesy_i = None
        return cls(courtesy_minutes=courtesy_i, raw=dict(data))


@dataclass(frozen=True)
class Rate:
    id: str
    vehicle_type: str
    rate_type: RateType
    value: Decimal
    courtesy_minutes: Optional[int] = None
    config: Any = None  # raw column; parsed per calculation by the context builder

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Rate":
        rate_id = _get(record, "id")
        if rate_id is None:
            raise ValueError(f"Rate record without id: {dict(record)!r}")
        label = str(_get(record, "rate_type", "rateType", default="") or "")
        return cls(
            id=str(rate_id),
            vehicle_type=str(_get(record, "vehicle_type", "vehicleType", default="") or ""),
            rate_type=RateType.parse(label),
            value=to_money(_get(record, "value"), field="value"),
            courtesy_minutes=to_optional_int(
                _get(record, "courtesy_minutes", "courtesyMinutes"), field="courtesy_minutes"
            ),
            config=_get(record, "config"),
        )


@dataclass(frozen=True)
class TimeWindow:
    id: str
    rate_id: str
    window_type: Optional[WindowType]
    start_time: timedelta = timedelta(0)
    end_time: Optional[timedelta] = None
    duration_limit_minutes: Optional[int] = None
    extra_rate_id: Optional[str] = None
    start_day: Optional[int] = None
    end_day: Optional[int] = None
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TimeWindow":
        return cls(
            id=str(_get(record, "id", default="")),
            rate_id=str(_get(record, "rate_id", "rateId", default="")),
            window_type=WindowType.parse(_get(record, "window_type", "windowType")),
            start_time=parse_time_of_day(_get(record, "start_time", "startTime"), field="start_time")
            or timedelta(0),
            end_time=parse_time_of_day(_get(record, "end_time", "endTime"), field="end_time"),
            duration_limit_minutes=to_optional_int(
                _get(record, "duration_limit_minutes", "durationLimitMinutes"),
                field="duration_limit_minutes",
            ),
            extra_rate_id=_optional_str(_get(record, "extra_rate_id", "extraRateId")),
            start_day=to_optional_int(_get(record, "start_day", "startDay"), field="start_day"),
            end_day=to_optional_int(_get(record, "end_day", "endDay"), field="end_day"),
            is_active=_as_bool(_get(record, "is_active", "isActive"), True),
        )


@dataclass(frozen=True)
class Threshold:
    id: str
    source_rate_id: str
    target_rate_id: str
    threshold_amount: Decimal
    auto_apply: bool = False

    @property
    def is_self_reference(self) -> bool:
        return self.source_rate_id == self.target_rate_id

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Threshold":
        return cls(
            id=str(_get(record, "id", default="")),
            source_rate_id=str(_get(record, "source_rate_id", "sourceRateId", default="")),
            target_rate_id=str(_get(record, "target_rate_id", "targetRateId", default="")),
            threshold_amount=to_money(
                _get(record, "threshold_amount", "thresholdAmount"), field="threshold_amount"
            ),
            auto_apply=_as_bool(_get(record, "auto_apply", "autoApply"), False),
        )


@dataclass(frozen=True)
class PricingRule:
    """Carried on the calculation context; not applied to any amount."""

    id: str
    rate_id: str
    rule_type: str
    conditions: Dict[str, Any] = field(default_factory=dict)
    value_adjustment: Dict[str, Any] = field(default_factory=dict)
    priority: int = 0
    description: str = ""
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PricingRule":
        return cls(
            id=str(_get(record, "id", default="")),
            rate_id=str(_get(record, "rate_id", "rateId", default="")),
            rule_type=str(_get(record, "rule_type", "ruleType", default="")),
            conditions=dict(_get(record, "conditions", default={}) or {}),
            value_adjustment=dict(_get(record, "value_adjustment", "valueAdjustment", default={}) or {}),
            priority=to_optional_int(_get(record, "priority"), field="priority") or 0,
            description=str(_get(record, "description", default="") or ""),
            is_active=_as_bool(_get(record, "is_active", "isActive"), True),
        )


@dataclass(frozen=True)
class Ticket:
    vehicle_type: str
    entry_date: Any
    entry_time: Any = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Ticket":
        return cls(
            vehicle_type=str(_get(record, "vehicle_type", "vehicleType", default="") or ""),
            entry_date=_get(record, "entry_date", "entryDate"),
            entry_time=_get(record, "entry_time", "entryTime"),
        )


__all__ = [
    "RateType",
    "WindowType",
    "RateConfig",
    "Rate",
    "TimeWindow",
    "Threshold",
    "PricingRule",
    "Ticket",
    "parse_time_of_day",
]
