"""
Holiday calendar resolution tests.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace

from schedule_engine.utils.holidays import (
    RangedHoliday,
    RecurringHoliday,
    build_holiday_snapshot,
    day_of_week_number,
    find_day_off,
    is_holiday_from_snapshot,
    is_shift_overridden,
    mark_shift_overridden,
    resolve_days_off,
)

SHIFTS = ["morning", "afternoon", "evening"]


def _rule(**values):
    defaults = {"name": "Rule", "is_recurring": False, "day_of_week": None, "start_date": None,
                "end_date": None, "is_active": True}
    defaults.update(values)
    return SimpleNamespace(**defaults)


def test_day_of_week_numbering_starts_on_sunday():
    assert day_of_week_number(date(2025, 4, 6)) == 1  # Sunday
    assert day_of_week_number(date(2025, 4, 7)) == 2  # Monday
    assert day_of_week_number(date(2025, 4, 12)) == 7  # Saturday


def test_recurring_rule_closes_every_matching_weekday():
    days = resolve_days_off(
        date(2025, 4, 1), date(2025, 4, 30), [RecurringHoliday("Sunday", 1)], [], SHIFTS
    )
    assert [entry["date"] for entry in days] == ["2025-04-06", "2025-04-13", "2025-04-20", "2025-04-27"]
    assert days[0]["reason"] == "Sunday"
    assert days[0]["shifts"]["morning"] == {"is_overridden": False, "overridden_at": None, "note": None}


def test_overlapping_rules_yield_one_entry_per_date():
    days = resolve_days_off(
        date(2025, 4, 1),
        date(2025, 4, 30),
        [RecurringHoliday("Sunday", 1)],
        [RangedHoliday("Festival", date(2025, 4, 5), date(2025, 4, 7))],
        SHIFTS,
    )
    dates = [entry["date"] for entry in days]
    assert dates.count("2025-04-06") == 1
    assert dates[:3] == ["2025-04-05", "2025-04-06", "2025-04-07"]
    assert dates == sorted(dates)


def test_inactive_rules_are_ignored():
    days = resolve_days_off(
        date(2025, 4, 1),
        date(2025, 4, 30),
        [RecurringHoliday("Sunday", 1, is_active=False)],
        [RangedHoliday("Closed", date(2025, 4, 10), date(2025, 4, 11), is_active=False)],
        SHIFTS,
    )
    assert days == []


def test_snapshot_only_lists_ranges_that_touch_the_period():
    rules = [
        _rule(name="Sunday", is_recurring=True, day_of_week=1),
        _rule(name="Spring", start_date=date(2025, 3, 30), end_date=date(2025, 4, 2)),
        _rule(name="Summer", start_date=date(2025, 7, 1), end_date=date(2025, 7, 3)),
    ]
    snapshot = build_holiday_snapshot(date(2025, 4, 1), date(2025, 4, 30), rules, SHIFTS)

    assert snapshot["recurring_holidays"] == [{"name": "Sunday", "day_of_week": 1}]
    assert [holiday["name"] for holiday in snapshot["non_recurring_holidays"]] == ["Spring"]
    assert [entry["date"] for entry in snapshot["computed_days_off"]][:2] == ["2025-04-01", "2025-04-02"]
    assert is_holiday_from_snapshot(date(2025, 4, 13), snapshot)
    assert not is_holiday_from_snapshot(date(2025, 4, 14), snapshot)


def test_override_marks_shift_and_removes_date_when_all_shifts_open():
    snapshot = build_holiday_snapshot(
        date(2025, 4, 1), date(2025, 4, 30), [_rule(name="Sunday", is_recurring=True, day_of_week=1)], SHIFTS
    )
    sunday = date(2025, 4, 6)
    at = datetime(2025, 4, 1, tzinfo=timezone.utc)

    updated = mark_shift_overridden(snapshot, sunday, "morning", at, note="Extra clinic")
    assert is_shift_overridden(updated, sunday, "morning")
    assert not is_shift_overridden(updated, sunday, "afternoon")
    assert find_day_off(updated, sunday)["shifts"]["morning"]["note"] == "Extra clinic"
    # Original snapshot is left untouched
    assert not is_shift_overridden(snapshot, sunday, "morning")

    updated = mark_shift_overridden(updated, sunday, "afternoon", at)
    updated = mark_shift_overridden(updated, sunday, "evening", at)
    assert find_day_off(updated, sunday) is None
    assert is_holiday_from_snapshot(date(2025, 4, 13), updated)
