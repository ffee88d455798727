from datetime import datetime
from decimal import Decimal

import pytest

from parking_pricing.charge_models import (
    BiweeklyChargeModel,
    DailyChargeModel,
    FallbackChargeModel,
    HourlyChargeModel,
    OvernightChargeModel,
    build_default_registry,
)
from parking_pricing.pricing.calculator import price
from parking_pricing.pricing.context import CalculationContext
from parking_pricing.pricing.types import Rate, RateConfig, RateType, TimeWindow
from parking_pricing.pricing.windows import group_windows_by_type


def _rate(rate_id, rate_type, value, courtesy=None, vehicle="Carro"):
    return Rate.from_record(
        {"id": rate_id, "vehicle_type": vehicle, "rate_type": rate_type, "value": value, "courtesy_minutes": courtesy}
    )


def _window(window_id, rate_id, window_type, **kw):
    return TimeWindow.from_record({"id": window_id, "rate_id": rate_id, "window_type": window_type, **kw})


def _context(rate, windows=(), hourly=None, related=()):
    return CalculationContext(
        rate=rate,
        config=RateConfig.parse(rate.config),
        windows_by_type=group_windows_by_type(windows),
        thresholds=[],
        related_rates={r.id: r for r in related},
        hourly_rate=hourly,
        pricing_rules=[],
    )


HOURLY = _rate("r-hour", "Hora", 5, courtesy=10)


@pytest.mark.parametrize(
    "exit, fractions",
    [
        (datetime(2024, 1, 1, 8, 1), 1),
        (datetime(2024, 1, 1, 9, 0), 1),
        (datetime(2024, 1, 1, 9, 10), 1),
        (datetime(2024, 1, 1, 9, 11), 2),
        (datetime(2024, 1, 1, 10, 0), 2),
    ],
)
def test_hourly_fraction_boundaries(exit, fractions):
    ctx = _context(_rate("h", "hourly", 10, courtesy=10))

    calc = HourlyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0), exit)

    assert calc.breakdown[0].fractions == fractions
    assert calc.total == Decimal(10 * fractions).quantize(Decimal("0.01"))


def test_hourly_sub_minute_stay_pays_one_fraction():
    ctx = _context(_rate("h", "hourly", 10))

    calc = HourlyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0, 0), datetime(2024, 1, 1, 8, 0, 30))

    assert calc.breakdown[0].minutes == 0
    assert calc.breakdown[0].fractions == 1
    assert calc.total == Decimal("10.00")


def test_daily_without_windows_rounds_days_up():
    ctx = _context(_rate("d", "Diária", 40))

    calc = DailyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 2, 9, 0))

    assert calc.breakdown[0].days == 2
    assert calc.total == Decimal("80.00")


def test_daily_window_overflow_billed_at_hourly_fallback():
    rate = _rate("d", "Diária", 40)
    ctx = _context(rate, [_window("w1", "d", "daily", start_time="08:00", end_time="18:00")], hourly=HOURLY)

    calc = DailyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 19, 30))

    assert [line.type for line in calc.breakdown] == ["daily"]
    assert calc.base_amount == Decimal("40.00")
    (extra,) = calc.extras
    assert extra.type == "daily_extra"
    assert extra.minutes == 90
    assert extra.fractions == 2
    assert extra.amount == Decimal("10.00")
    assert extra.rate_id == "r-hour"
    assert calc.total == Decimal("50.00")


def test_daily_overflow_without_hourly_uses_rate_itself():
    rate = _rate("d", "Diária", 40)
    ctx = _context(rate, [_window("w1", "d", "daily", start_time="08:00", end_time="18:00")])

    calc = DailyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 18, 30))

    assert calc.extras[0].rate_id == "d"
    assert calc.extras[0].amount == Decimal("40.00")


def test_daily_charges_once_per_day_first_window_wins():
    rate = _rate("d", "Diária", 40)
    windows = [
        _window("w1", "d", "daily", start_time="08:00", end_time="18:00"),
        _window("w2", "d", "daily", start_time="06:00", end_time="20:00"),
    ]
    ctx = _context(rate, windows, hourly=HOURLY)

    calc = DailyChargeModel().charge(ctx, datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 2, 17, 0))

    assert [line.window_id for line in calc.breakdown] == ["w1", "w1"]
    assert calc.extras == []
    assert calc.total == Decimal("80.00")


def test_daily_entry_day_without_match_gets_standard_line():
    rate = _rate("d", "Diária", 40)
    ctx = _context(rate, [_window("w1", "d", "daily", start_time="08:00", end_time="18:00")], hourly=HOURLY)

    calc = DailyChargeModel().charge(ctx, datetime(2024, 1, 1, 19, 0), datetime(2024, 1, 1, 23, 0))

    (line,) = calc.breakdown
    assert "standard window" in line.description
    assert line.window_id is None
    assert calc.total == Decimal("40.00")


def test_overnight_crosses_midnight_and_uses_window_extra_rate():
    rate = _rate("n", "Pernoite", 50)
    extra = _rate("x", "Hora", 8, courtesy=0)
    windows = [_window("w1", "n", "pernoite", start_time="22:00", end_time="06:00", extra_rate_id="x")]
    ctx = _context(rate, windows, hourly=HOURLY, related=[extra])

    calc = OvernightChargeModel().charge(ctx, datetime(2024, 1, 1, 21, 30), datetime(2024, 1, 2, 7, 30))

    (line,) = calc.breakdown
    assert line.type == "overnight"
    assert line.start == datetime(2024, 1, 1, 22, 0)
    assert line.end == datetime(2024, 1, 2, 6, 0)
    (extra_line,) = calc.extras
    assert extra_line.type == "overnight_extra"
    assert extra_line.rate_id == "x"
    assert extra_line.minutes == 90
    assert extra_line.amount == Decimal("16.00")
    assert calc.total == Decimal("66.00")


def test_overnight_exit_at_window_end_has_no_extras():
    rate = _rate("n", "Pernoite", 50)
    ctx = _context(rate, [_window("w1", "n", "overnight", start_time="22:00", end_time="06:00")], hourly=HOURLY)

    calc = OvernightChargeModel().charge(ctx, datetime(2024, 1, 1, 21, 30), datetime(2024, 1, 2, 6, 0))

    assert calc.extras == []
    assert calc.total == Decimal("50.00")


def test_overnight_daytime_between_nights_is_overtime():
    rate = _rate("n", "Pernoite", 40)
    ctx = _context(rate, [_window("w1", "n", "pernoite", start_time="22:00", end_time="06:00")], hourly=HOURLY)

    calc = OvernightChargeModel().charge(ctx, datetime(2025, 2, 12, 21, 30), datetime(2025, 2, 13, 23, 0))

    assert [line.day.isoformat() for line in calc.breakdown] == ["2025-02-12", "2025-02-13"]
    (extra,) = calc.extras
    assert extra.minutes == 16 * 60
    assert extra.fractions == 16
    assert extra.rate_id == "r-hour"
    assert extra.amount == Decimal("80.00")
    assert calc.total == Decimal("160.00")


def test_overnight_bills_each_gap_and_the_final_morning():
    rate = _rate("n", "Pernoite", 50)
    extra = _rate("x", "Hora", 8, courtesy=0)
    windows = [_window("w1", "n", "overnight", start_time="22:00", end_time="06:00", extra_rate_id="x")]
    ctx = _context(rate, windows, hourly=HOURLY, related=[extra])

    calc = OvernightChargeModel().charge(ctx, datetime(2024, 1, 1, 21, 30), datetime(2024, 1, 3, 7, 0))

    assert len(calc.breakdown) == 2
    assert [line.minutes for line in calc.extras] == [16 * 60, 60]
    assert all(line.rate_id == "x" for line in calc.extras)
    assert calc.extra_amount == Decimal("136.00")
    assert calc.total == Decimal("236.00")


def test_overnight_without_windows_is_one_flat_charge():
    ctx = _context(_rate("n", "overnight", 50))

    calc = OvernightChargeModel().charge(ctx, datetime(2024, 1, 1, 20, 0), datetime(2024, 1, 3, 9, 0))

    assert len(calc.breakdown) == 1
    assert calc.total == Decimal("50.00")


def test_weekly_minutes_beyond_allowance_are_extras():
    rate = _rate("w", "Semanal", 200)
    ctx = _context(rate, hourly=HOURLY)

    calc = price(ctx, datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 8, 11, 0))

    (flat,) = calc.breakdown
    assert flat.type == "weekly"
    assert flat.amount == Decimal("200.00")
    (extra,) = calc.extras
    assert extra.type == "weekly_extra"
    assert extra.minutes == 180
    assert extra.fractions == 3
    assert calc.total == Decimal("215.00")


def test_biweekly_window_duration_limit_sets_allowance():
    rate = _rate("b", "Quinzenal", 300)
    windows = [_window("w1", "b", "quinzenal", start_time="00:00", duration_limit_minutes=600)]
    ctx = _context(rate, windows, hourly=HOURLY)

    calc = BiweeklyChargeModel().charge(ctx, datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 19, 0))

    assert calc.extras[0].minutes == 60
    assert calc.extras[0].window_id == "w1"
    assert calc.total == Decimal("305.00")


def test_unknown_rate_type_is_one_flat_line():
    rate = _rate("f", "Especial evento", 25)
    assert rate.rate_type == RateType.FALLBACK

    calc = price(_context(rate), datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 23, 0))

    assert [line.type for line in calc.breakdown] == ["flat"]
    assert calc.total == Decimal("25.00")


def test_registry_falls_back_for_unregistered_types():
    reg = build_default_registry()
    assert isinstance(reg.get(RateType.FALLBACK), FallbackChargeModel)
    assert isinstance(reg.get(RateType.DAILY), DailyChargeModel)
