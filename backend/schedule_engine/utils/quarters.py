"""
Quarter and month boundary arithmetic, evaluated in the civil timezone.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Tuple

from schedule_engine.utils.civil_time import civil_date, end_of_civil_day, start_of_civil_day


@dataclass(frozen=True, order=True)
class QuarterRef:
    """A calendar quarter of a year."""
    year: int
    quarter: int

    def __post_init__(self):
        if not 1 <= self.quarter <= 4:
            raise ValueError(f"quarter must be 1..4, got {self.quarter}")

    def following(self) -> "QuarterRef":
        if self.quarter == 4:
            return QuarterRef(year=self.year + 1, quarter=1)
        return QuarterRef(year=self.year, quarter=self.quarter + 1)

    @property
    def months(self) -> List[int]:
        return months_in_quarter(self.quarter)

    def as_dict(self) -> dict:
        return {"quarter": self.quarter, "year": self.year}


def quarter_of(moment: date | datetime) -> QuarterRef:
    """Quarter containing the civil date of `moment`."""
    day = civil_date(moment)
    return QuarterRef(year=day.year, quarter=(day.month - 1) // 3 + 1)


def months_in_quarter(quarter: int) -> List[int]:
    first = (quarter - 1) * 3 + 1
    return [first, first + 1, first + 2]


def is_last_day_of_month(moment: date | datetime) -> bool:
    day = civil_date(moment)
    return (day + timedelta(days=1)).month != day.month


def is_last_day_of_quarter(moment: date | datetime) -> bool:
    day = civil_date(moment)
    return day.month % 3 == 0 and is_last_day_of_month(day)


def next_schedulable_quarter(moment: date | datetime) -> QuarterRef:
    """
    Quarter that generation should target from `moment`.

    On the last day of a quarter the current quarter is skipped and the
    following one is returned.
    """
    current = quarter_of(moment)
    if is_last_day_of_quarter(moment):
        return current.following()
    return current


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """First and last civil date of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_date_range(month: int, year: int) -> Tuple[datetime, datetime]:
    """Inclusive month range from civil midnight to civil end-of-day."""
    first, last = month_bounds(month, year)
    return start_of_civil_day(first), end_of_civil_day(last)


def quarter_date_range(quarter: int, year: int) -> Tuple[datetime, datetime]:
    """Inclusive quarter range from civil midnight to civil end-of-day."""
    months = months_in_quarter(quarter)
    first, _ = month_bounds(months[0], year)
    _, last = month_bounds(months[-1], year)
    return start_of_civil_day(first), end_of_civil_day(last)
