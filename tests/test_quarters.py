"""
Quarter and month boundary tests.
"""

from datetime import date, datetime, timezone

import pytest

from schedule_engine.utils.quarters import (
    QuarterRef,
    is_last_day_of_month,
    is_last_day_of_quarter,
    month_bounds,
    month_date_range,
    next_schedulable_quarter,
    quarter_date_range,
    quarter_of,
)
from tests.factories import civil


@pytest.mark.parametrize("day", [date(2024, 3, 31), date(2024, 6, 30), date(2024, 9, 30), date(2024, 12, 31)])
def test_last_day_of_quarter(day):
    assert is_last_day_of_quarter(day)


@pytest.mark.parametrize("day", [date(2024, 3, 30), date(2024, 6, 29), date(2024, 9, 29), date(2024, 12, 30), date(2024, 1, 31)])
def test_not_last_day_of_quarter(day):
    assert not is_last_day_of_quarter(day)


def test_next_schedulable_quarter_skips_current_on_boundary():
    assert next_schedulable_quarter(date(2024, 3, 31)) == QuarterRef(year=2024, quarter=2)
    assert next_schedulable_quarter(date(2024, 3, 15)) == QuarterRef(year=2024, quarter=1)
    assert next_schedulable_quarter(date(2024, 12, 31)) == QuarterRef(year=2025, quarter=1)


def test_boundaries_use_civil_date():
    """18:00 UTC on March 30 is already March 31 in the clinic's timezone."""
    moment = datetime(2024, 3, 30, 18, 0, tzinfo=timezone.utc)
    assert is_last_day_of_quarter(moment)
    assert is_last_day_of_month(moment)
    assert quarter_of(moment) == QuarterRef(year=2024, quarter=1)


def test_last_day_of_month_handles_leap_years():
    assert is_last_day_of_month(date(2024, 2, 29))
    assert not is_last_day_of_month(date(2024, 2, 28))
    assert is_last_day_of_month(date(2025, 2, 28))


def test_quarter_of():
    assert quarter_of(civil(2025, 5, 10)) == QuarterRef(year=2025, quarter=2)
    assert quarter_of(date(2025, 12, 1)).months == [10, 11, 12]


def test_following_rolls_over_year():
    assert QuarterRef(year=2024, quarter=4).following() == QuarterRef(year=2025, quarter=1)


def test_invalid_quarter():
    with pytest.raises(ValueError):
        QuarterRef(year=2024, quarter=5)


def test_month_bounds():
    assert month_bounds(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(4, 2025) == (date(2025, 4, 1), date(2025, 4, 30))


def test_date_ranges_are_inclusive_civil_days():
    start, end = quarter_date_range(2, 2024)
    assert start == civil(2024, 4, 1, 0, 0)
    assert end.date() == date(2024, 6, 30)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)

    month_start, month_end = month_date_range(2, 2024)
    assert month_start.date() == date(2024, 2, 1)
    assert month_end.date() == date(2024, 2, 29)
