"""
Audit trail of one price calculation.

Every phase of calculate_advanced_price appends one JSON line:

  context_built        what was fetched for a rate (windows, thresholds, hourly fallback)
  base_priced          the ChargeCalculation of that rate
  threshold_evaluated  one Suggestion produced from a reached threshold
  auto_applied         the {from, to} switch, when one happened
  result               the final PriceResult

Lines carry a per-trace sequence number so a file shared by several
calculations can still be split and ordered.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


class TracePhase(str, Enum):
    CONTEXT_BUILT = "context_built"
    BASE_PRICED = "base_priced"
    THRESHOLD_EVALUATED = "threshold_evaluated"
    AUTO_APPLIED = "auto_applied"
    RESULT = "result"


def _serialize(obj: Any) -> Dict[str, Any]:
    # result dataclasses know their own JSON shape
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Mapping):
        return dict(obj)
    raise TypeError(f"Cannot trace {type(obj).__name__}")


@dataclass
class PricingTrace:
    path: Path
    enabled: bool = True
    ticket_id: Optional[str] = None
    sequence: int = field(default=0, init=False)

    def record(self, phase: TracePhase | str, rate_id: str, payload: Any) -> None:
        if not self.enabled:
            return
        phase = TracePhase(phase)
        body = _serialize(payload)
        self.sequence += 1

        event: Dict[str, Any] = {
            "seq": self.sequence,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "phase": phase.value,
            "rate_id": rate_id,
            "payload": body,
        }
        if self.ticket_id:
            event["ticket_id"] = self.ticket_id

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")

    def context_built(self, context) -> None:
        self.record(
            TracePhase.CONTEXT_BUILT,
            context.rate.id,
            {
                "rate_type": context.rate.rate_type.value,
                "windows": {wt.value: [w.id for w in ws] for wt, ws in context.windows_by_type.items() if ws},
                "thresholds": [t.threshold.id for t in context.thresholds],
                "related_rates": sorted(context.related_rates),
                "hourly_rate_id": context.hourly_rate.id if context.hourly_rate else None,
            },
        )

    def base_priced(self, calculation) -> None:
        self.record(TracePhase.BASE_PRICED, calculation.rate_id, calculation)

    def threshold_evaluated(self, source_rate_id: str, suggestion) -> None:
        self.record(TracePhase.THRESHOLD_EVALUATED, source_rate_id, suggestion)

    def auto_applied(self, auto_applied) -> None:
        self.record(TracePhase.AUTO_APPLIED, auto_applied.from_rate_id, auto_applied)

    def result(self, rate_id: str, result) -> None:
        self.record(TracePhase.RESULT, rate_id, result)


def build_pricing_trace(path: Path | str, enabled: bool = True, ticket_id: Optional[str] = None) -> PricingTrace:
    return PricingTrace(Path(path), enabled=enabled, ticket_id=ticket_id)


def read_trace(path: Path | str) -> List[Dict[str, Any]]:
    """Events of a trace file in write order; blank lines are skipped."""
    with Path(path).open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]


__all__ = ["TracePhase", "PricingTrace", "build_pricing_trace", "read_trace"]
