from parking_pricing.charge_models.base import count_fractions


def test_zero_and_negative_minutes_bill_nothing():
    assert count_fractions(0, 10) == 0
    assert count_fractions(-5, 10) == 0


def test_sub_hour_stay_is_one_fraction():
    # remainder is measured after the sub-hour bump, so it never adds a second fraction
    assert count_fractions(1, 0) == 1
    assert count_fractions(59, 0) == 1


def test_remainder_within_courtesy_is_free():
    assert count_fractions(125, 10) == 2
    assert count_fractions(130, 10) == 2
    assert count_fractions(131, 10) == 3


def test_zero_courtesy_bills_every_started_hour():
    assert count_fractions(61, 0) == 2
    assert count_fractions(180, 0) == 3
