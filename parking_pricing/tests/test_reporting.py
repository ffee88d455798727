from decimal import Decimal

import pytest
from rich.console import Console

from parking_pricing.pricing.engine import calculate_advanced_price
from parking_pricing.pricing.result import Duration
from parking_pricing.pricing.types import Ticket
from parking_pricing.reporting.format import format_currency, format_duration, render_price_report
from parking_pricing.reporting.tables import build_console_table
from parking_pricing.store import InMemoryRateStore


def test_format_currency_brl_and_others():
    assert format_currency(Decimal("1234.5"), "BRL") == "R$ 1.234,50"
    assert format_currency(Decimal("-3"), "brl") == "-R$ 3,00"
    assert format_currency(1234.5, "USD") == "1,234.50 USD"


def test_format_duration_pads_minutes():
    assert format_duration(Duration(hours=2, minutes=5, total_minutes=125)) == "2h05"


async def _priced(car_rates, thresholds=()):
    store = InMemoryRateStore.from_records({"rates": car_rates, "thresholds": list(thresholds)})
    ticket = Ticket(vehicle_type="Carro", entry_date="2024-01-01", entry_time="08:00")
    return await calculate_advanced_price(ticket, store.rates["r-hour"], "2024-01-01", "14:00", store=store)


@pytest.mark.anyio
async def test_price_report_sections(car_rates):
    result = await _priced(
        car_rates,
        [{"id": "t1", "source_rate_id": "r-hour", "target_rate_id": "r-day", "threshold_amount": 30}],
    )

    md = render_price_report(result, "BRL")

    assert md.startswith("## Summary")
    assert "## Breakdown" in md
    assert "## Suggestions" in md
    assert "## Extras" not in md
    assert "R$ 60,00" in md
    assert "6h00" in md
    assert "| r-day | daily |" in md


@pytest.mark.anyio
async def test_console_table_has_footer_total(car_rates):
    result = await _priced(car_rates)
    console = Console(record=True, width=120)

    console.print(build_console_table(result, "BRL"))
    text = console.export_text()

    assert "Total" in text
    assert "R$ 60,00" in text
    assert "hourly" in text
