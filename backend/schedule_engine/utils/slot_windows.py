"""
Slot window arithmetic: tiling a shift into fixed-duration windows and
half-open interval overlap.
"""

from datetime import date, datetime, timedelta
from typing import List, Tuple

from schedule_engine.core.exceptions import ConfigurationError
from schedule_engine.utils.civil_time import civil_to_utc, minutes_between, parse_hhmm


def validate_slot_duration(shift_name: str, shift_start: str, shift_end: str, slot_duration: int) -> int:
    """Return the shift span in minutes, or raise ConfigurationError."""
    try:
        span = minutes_between(shift_start, shift_end)
    except ValueError as exc:
        raise ConfigurationError(
            f"Shift '{shift_name}' has an invalid time window",
            details={"shift": shift_name, "start_time": shift_start, "end_time": shift_end},
        ) from exc

    if span <= 0:
        raise ConfigurationError(
            f"Shift '{shift_name}' must end after it starts",
            details={"shift": shift_name, "start_time": shift_start, "end_time": shift_end},
        )
    if slot_duration is None or slot_duration <= 0 or slot_duration > span:
        raise ConfigurationError(
            f"Slot duration {slot_duration} is invalid for shift '{shift_name}' ({span} minutes)",
            details={"shift": shift_name, "slot_duration": slot_duration, "shift_minutes": span},
        )
    return span


def tile_shift(day: date, shift_start: str, shift_end: str, slot_duration: int) -> List[Tuple[datetime, datetime]]:
    """
    Consecutive [start, end) windows of exactly `slot_duration` minutes covering
    the shift on `day`, as naive UTC datetimes. A trailing remainder shorter
    than `slot_duration` produces no window.
    """
    span = minutes_between(shift_start, shift_end)
    first = civil_to_utc(day, parse_hhmm(shift_start))
    step = timedelta(minutes=slot_duration)
    return [
        (first + step * index, first + step * (index + 1))
        for index in range(span // slot_duration)
    ]


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap."""
    return a_start < b_end and b_start < a_end
