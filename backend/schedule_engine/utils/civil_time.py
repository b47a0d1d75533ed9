"""
Civil-time helpers.

Every calendar decision (today, tomorrow, month and quarter boundaries, shift
windows) is taken in one fixed civil timezone. Slot instants are persisted as
naive UTC datetimes.
"""

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

from schedule_engine.core.config import settings


@lru_cache(maxsize=None)
def civil_tz() -> ZoneInfo:
    return ZoneInfo(settings.CIVIL_TIMEZONE)


def civil_now() -> datetime:
    """Current instant as an aware datetime in the civil timezone."""
    return datetime.now(tz=civil_tz())


def to_civil(moment: datetime) -> datetime:
    """Convert an instant to civil time. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(civil_tz())


def civil_date(moment: Optional[datetime | date] = None) -> date:
    """Civil calendar date of an instant (defaults to now)."""
    if moment is None:
        return civil_now().date()
    if isinstance(moment, datetime):
        return to_civil(moment).date()
    return moment


def civil_tomorrow(now: Optional[datetime] = None) -> date:
    return civil_date(now) + timedelta(days=1)


def parse_hhmm(value: str) -> time:
    """Parse an `HH:mm` shift boundary."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid HH:mm time: {value!r}") from exc


def minutes_between(start_hhmm: str, end_hhmm: str) -> int:
    """Length in minutes of a same-day window; negative if end precedes start."""
    start = parse_hhmm(start_hhmm)
    end = parse_hhmm(end_hhmm)
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def civil_to_utc(day: date, at: time) -> datetime:
    """Civil wall-clock time on `day` as a naive UTC datetime."""
    local = datetime.combine(day, at, tzinfo=civil_tz())
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_civil_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=civil_tz())


def end_of_civil_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=civil_tz())


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def clamp_range(start: date, end: date, lower: date, upper: date) -> Optional[Tuple[date, date]]:
    """Intersection of [start, end] with [lower, upper], or None when disjoint."""
    clipped_start = max(start, lower)
    clipped_end = min(end, upper)
    if clipped_start > clipped_end:
        return None
    return clipped_start, clipped_end
