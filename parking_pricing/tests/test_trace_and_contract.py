import json
from pathlib import Path

import pytest

from parking_pricing.pricing.engine import calculate_advanced_price
from parking_pricing.pricing.types import Ticket
from parking_pricing.store import InMemoryRateStore
from parking_pricing.utils.trace import TracePhase, build_pricing_trace, read_trace


@pytest.mark.anyio
async def test_trace_records_every_phase(tmp_path: Path, car_rates):
    trace_path = tmp_path / "nested" / "trace.jsonl"
    trace = build_pricing_trace(trace_path, ticket_id="T-1")
    store = InMemoryRateStore.from_records(
        {
            "rates": car_rates,
            "thresholds": [
                {"id": "t1", "source_rate_id": "r-hour", "target_rate_id": "r-day", "threshold_amount": 30, "auto_apply": True}
            ],
        }
    )
    ticket = Ticket(vehicle_type="Carro", entry_date="2024-01-01", entry_time="08:00")

    await calculate_advanced_price(ticket, store.rates["r-hour"], "2024-01-01", "14:00", store=store, trace=trace)

    events = read_trace(trace_path)
    phases = [e["phase"] for e in events]
    assert phases == ["context_built", "base_priced", "threshold_evaluated", "auto_applied", "result"]
    assert all(e["ticket_id"] == "T-1" for e in events)
    assert events[-1]["payload"]["applied_rate"] == {"id": "r-day", "type": "daily"}
    assert events[2]["payload"]["savings"] == 20.0
    assert [e["seq"] for e in events] == [1, 2, 3, 4, 5]
    assert events[0]["payload"]["related_rates"] == ["r-day"]
    assert events[0]["payload"]["hourly_rate_id"] == "r-hour"
    assert events[1]["payload"]["total"] == 60.0
    assert events[3]["rate_id"] == "r-hour"
    assert events[3]["payload"] == {"from": "r-hour", "to": "r-day"}


def test_disabled_trace_writes_nothing(tmp_path: Path):
    path = tmp_path / "trace.jsonl"
    trace = build_pricing_trace(path, enabled=False)

    trace.record(TracePhase.RESULT, "r-1", {"price": 1})

    assert not path.exists()


@pytest.mark.anyio
async def test_result_contract_is_json_serializable(car_rates):
    store = InMemoryRateStore.from_records({"rates": car_rates})
    ticket = Ticket(vehicle_type="Carro", entry_date="2024-01-01", entry_time="08:00")

    result = await calculate_advanced_price(ticket, store.rates["r-hour"], "2024-01-01", "10:05", store=store)
    payload = json.loads(json.dumps(result.to_dict()))

    assert set(payload) == {
        "price",
        "duration",
        "breakdown",
        "extras",
        "applied_rate",
        "suggestions",
        "auto_applied",
        "base_calculation",
    }
    assert payload["price"] == 20.0
    assert payload["duration"] == {"hours": 2, "minutes": 5, "total_minutes": 125}
    assert payload["breakdown"][0]["type"] == "hourly"
    assert payload["auto_applied"] is None
    assert payload["base_calculation"]["total"] == 20.0


def test_trace_rejects_unknown_phase(tmp_path: Path):
    trace = build_pricing_trace(tmp_path / "trace.jsonl")

    with pytest.raises(ValueError):
        trace.record("rules_applied", "r-1", {})
    with pytest.raises(TypeError):
        trace.record(TracePhase.RESULT, "r-1", 42)
    assert trace.sequence == 0
