from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from .normalize import quantize
from .types import RateType


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, RateType):
        return value.value
    return value


@dataclass(frozen=True)
class ChargeLine:
    """One priced, independently summable line of a calculation."""

    type: str  # hourly | daily | daily_extra | overnight | overnight_extra | weekly | ... | flat
    description: str
    amount: Decimal
    rate_id: Optional[str] = None
    unit_value: Optional[Decimal] = None
    minutes: Optional[int] = None
    fractions: Optional[int] = None
    days: Optional[int] = None
    window_id: Optional[str] = None
    day: Optional[date] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for k, v in self.__dict__.items():
            if v is None:
                continue
            out[k] = _jsonable(v)
        return out


@dataclass(frozen=True)
class ChargeCalculation:
    rate_id: str
    rate_type: RateType
    breakdown: List[ChargeLine] = field(default_factory=list)
    extras: List[ChargeLine] = field(default_factory=list)

    @property
    def base_amount(self) -> Decimal:
        return quantize(sum((line.amount for line in self.breakdown), Decimal("0")))

    @property
    def extra_amount(self) -> Decimal:
        return quantize(sum((line.amount for line in self.extras), Decimal("0")))

    @property
    def total(self) -> Decimal:
        return self.base_amount + self.extra_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rate_id": self.rate_id,
            "rate_type": self.rate_type.value,
            "base_amount": float(self.base_amount),
            "extra_amount": float(self.extra_amount),
            "total": float(self.total),
            "breakdown": [line.to_dict() for line in self.breakdown],
            "extras": [line.to_dict() for line in self.extras],
        }


@dataclass(frozen=True)
class Duration:
    hours: int
    minutes: int
    total_minutes: int

    @classmethod
    def between(cls, entry: datetime, exit: datetime) -> "Duration":
        # half a minute rounds up (08:00:00 -> 08:02:30 is 3 minutes)
        seconds = Decimal(str((exit - entry).total_seconds()))
        total = max(int((seconds / 60).quantize(Decimal(1), rounding=ROUND_HALF_UP)), 0)
        return cls(hours=total // 60, minutes=total % 60, total_minutes=total)

    def to_dict(self) -> Dict[str, int]:
        return {"hours": self.hours, "minutes": self.minutes, "total_minutes": self.total_minutes}


@dataclass(frozen=True)
class Suggestion:
    rate_id: str
    rate_type: RateType
    threshold_amount: Decimal
    target_price: Decimal
    current_price: Decimal
    savings: Decimal
    auto_apply: bool
    threshold_id: str = ""
    # full priced alternative, used when the suggestion is auto-applied
    calculation: Optional[ChargeCalculation] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {k: _jsonable(v) for k, v in self.__dict__.items() if k != "calculation"}


@dataclass(frozen=True)
class AppliedRate:
    id: str
    type: RateType


@dataclass(frozen=True)
class AutoApplied:
    from_rate_id: str
    to_rate_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.from_rate_id, "to": self.to_rate_id}


@dataclass(frozen=True)
class PriceResult:
    price: Decimal
    duration: Duration
    breakdown: List[ChargeLine]
    extras: List[ChargeLine]
    applied_rate: AppliedRate
    suggestions: List[Suggestion]
    auto_applied: Optional[AutoApplied]
    base_calculation: ChargeCalculation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price": float(self.price),
            "duration": self.duration.to_dict(),
            "breakdown": [line.to_dict() for line in self.breakdown],
            "extras": [line.to_dict() for line in self.extras],
            "applied_rate": {"id": self.applied_rate.id, "type": self.applied_rate.type.value},
            "suggestions": [s.to_dict() for s in self.suggestions],
            "auto_applied": self.auto_applied.to_dict() if self.auto_applied else None,
            "base_calculation": self.base_calculation.to_dict(),
        }


__all__ = [
    "ChargeLine",
    "ChargeCalculation",
    "Duration",
    "Suggestion",
    "AppliedRate",
    "AutoApplied",
    "PriceResult",
]
