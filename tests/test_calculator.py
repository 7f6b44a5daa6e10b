import pytest

from discharge_monitor.calculator import (
    UNKNOWN,
    DischargeEstimate,
    compute,
    discharge_time,
    format_estimate,
)


def test_half_battery_at_410ma():
    estimate = compute(50, 410, 4100)
    assert estimate == DischargeEstimate(hours=5, minutes=0)
    assert format_estimate(estimate) == "5h 0m"


def test_under_an_hour_shows_minutes_only():
    estimate = compute(10, 2000, 4100)
    assert estimate == DischargeEstimate(hours=0, minutes=12)
    assert str(estimate) == "12m"


@pytest.mark.parametrize("current_ma", [0, -1, -450])
def test_non_positive_current_is_unknown(current_ma):
    assert compute(80, current_ma, 4100) == UNKNOWN
    assert discharge_time(80, current_ma, 4100) == "Unknown"


def test_full_battery_at_capacity_current_is_one_hour():
    assert compute(100, 4100, 4100) == DischargeEstimate(hours=1, minutes=0)


def test_empty_battery():
    assert discharge_time(0, 300, 4100) == "0m"


def test_fractional_hours():
    # 3000 * 0.75 / 1000 = 2.25h
    assert discharge_time(75, 1000, 3000) == "2h 15m"


def test_decreasing_in_current():
    totals = [compute(60, ma, 4100).total_minutes() for ma in (50, 120, 300, 450, 900, 2500)]
    assert totals == sorted(totals, reverse=True)


def test_increasing_in_percent():
    totals = [compute(p, 450, 4100).total_minutes() for p in range(0, 101, 5)]
    assert totals == sorted(totals)


def test_minutes_stay_below_sixty():
    for percent in range(0, 101, 7):
        for ma in (1, 13, 333, 999):
            estimate = compute(percent, ma, 4100)
            assert 0 <= estimate.minutes <= 59
            assert estimate.hours >= 0


def test_unknown_has_no_total():
    assert not UNKNOWN.known
    assert UNKNOWN.total_minutes() is None
