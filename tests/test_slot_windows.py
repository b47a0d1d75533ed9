"""
Slot window and slot factory tests.
"""

from datetime import date, datetime
from uuid import uuid4

import pytest

from schedule_engine.core.exceptions import ConfigurationError
from schedule_engine.services.slot_factory_service import SlotFactoryService
from schedule_engine.utils.holidays import build_holiday_snapshot
from schedule_engine.utils.slot_windows import overlaps, tile_shift, validate_slot_duration


def test_tile_shift_converts_civil_time_to_utc():
    windows = tile_shift(date(2025, 4, 1), "08:00", "12:00", 30)
    assert len(windows) == 8
    assert windows[0] == (datetime(2025, 4, 1, 1, 0), datetime(2025, 4, 1, 1, 30))
    assert windows[-1][1] == datetime(2025, 4, 1, 5, 0)


def test_tile_shift_discards_trailing_remainder():
    windows = tile_shift(date(2025, 4, 1), "08:00", "09:00", 25)
    assert len(windows) == 2
    assert windows[-1][1] == datetime(2025, 4, 1, 1, 50)


@pytest.mark.parametrize(
    "start,end,duration",
    [("12:00", "08:00", 30), ("08:00", "08:00", 15), ("08:00", "09:00", 90), ("08:00", "09:00", 0), ("8h", "9h", 15)],
)
def test_invalid_windows_raise_configuration_error(start, end, duration):
    with pytest.raises(ConfigurationError):
        validate_slot_duration("morning", start, end, duration)


def test_overlap_is_half_open():
    nine, ten, eleven = datetime(2025, 4, 1, 9), datetime(2025, 4, 1, 10), datetime(2025, 4, 1, 11)
    assert overlaps(nine, eleven, ten, eleven)
    assert not overlaps(nine, ten, ten, eleven)


def test_build_slot_rows_skips_snapshot_holidays():
    factory = SlotFactoryService(session=None)
    snapshot = build_holiday_snapshot(date(2025, 4, 1), date(2025, 4, 7), [], ["morning"])
    snapshot["computed_days_off"].append(
        {"date": "2025-04-03", "reason": "Closed", "shifts": {"morning": {"is_overridden": False}}}
    )
    kwargs = dict(
        schedule_id=uuid4(),
        room_id="room-a",
        sub_room_id=None,
        shift_name="morning",
        shift_start="08:00",
        shift_end="12:00",
        slot_duration=240,
        range_start=date(2025, 4, 1),
        range_end=date(2025, 4, 7),
        holiday_snapshot=snapshot,
    )

    rows = factory.build_slot_rows(**kwargs)
    assert len(rows) == 6
    assert date(2025, 4, 3) not in {row["date"] for row in rows}

    overridden = factory.build_slot_rows(**kwargs, skip_holidays=False, is_holiday_override=True)
    assert len(overridden) == 7
    assert all(row["is_holiday_override"] for row in overridden)
