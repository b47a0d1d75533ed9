"""
Holiday calendar resolution and holiday-snapshot helpers.

A holiday snapshot is the JSON document stored on a Schedule:

    {
        "recurring_holidays": [{"name": ..., "day_of_week": 1..7}],
        "non_recurring_holidays": [{"name": ..., "start_date": "YYYY-MM-DD", "end_date": ...}],
        "computed_days_off": [
            {"date": "YYYY-MM-DD", "reason": ..., "shifts": {
                "<shift>": {"is_overridden": False, "overridden_at": None, "note": None}}}
        ],
    }

Day-of-week numbers run 1 (Sunday) through 7 (Saturday).
"""

import copy
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from schedule_engine.utils.civil_time import iter_days


@dataclass(frozen=True)
class RecurringHoliday:
    name: str
    day_of_week: int
    is_active: bool = True


@dataclass(frozen=True)
class RangedHoliday:
    name: str
    start_date: date
    end_date: date
    is_active: bool = True

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def day_of_week_number(day: date) -> int:
    """1 = Sunday, 2 = Monday, ..., 7 = Saturday."""
    return (day.weekday() + 1) % 7 + 1


def _fresh_shift_states(shift_names: Sequence[str]) -> Dict[str, Dict[str, Any]]:
    return {
        name: {"is_overridden": False, "overridden_at": None, "note": None}
        for name in shift_names
    }


def resolve_days_off(
    start: date,
    end: date,
    recurring_rules: Iterable[RecurringHoliday],
    ranged_rules: Iterable[RangedHoliday],
    shift_names: Sequence[str],
) -> List[Dict[str, Any]]:
    """
    Days in [start, end] closed by an active recurring weekday rule or by an
    active ranged rule, one entry per date, sorted ascending. Every entry
    carries a not-overridden state for each shift in `shift_names`.
    """
    recurring = [rule for rule in recurring_rules if rule.is_active]
    ranged = [rule for rule in ranged_rules if rule.is_active]

    days_off: Dict[date, Dict[str, Any]] = {}
    for day in iter_days(start, end):
        reason: Optional[str] = None
        weekday = day_of_week_number(day)
        for rule in recurring:
            if rule.day_of_week == weekday:
                reason = rule.name
                break
        if reason is None:
            for rule in ranged:
                if rule.covers(day):
                    reason = rule.name
                    break
        if reason is not None and day not in days_off:
            days_off[day] = {
                "date": day.isoformat(),
                "reason": reason,
                "shifts": _fresh_shift_states(shift_names),
            }

    return [days_off[day] for day in sorted(days_off)]


def split_rules(rules: Iterable[Any]) -> tuple[List[RecurringHoliday], List[RangedHoliday]]:
    """Split holiday rule rows (anything with HolidayRule's attributes) by kind."""
    recurring: List[RecurringHoliday] = []
    ranged: List[RangedHoliday] = []
    for rule in rules:
        if rule.is_recurring:
            if rule.day_of_week is None:
                continue
            recurring.append(RecurringHoliday(rule.name, rule.day_of_week, bool(rule.is_active)))
        else:
            if rule.start_date is None or rule.end_date is None:
                continue
            ranged.append(RangedHoliday(rule.name, rule.start_date, rule.end_date, bool(rule.is_active)))
    return recurring, ranged


def build_holiday_snapshot(
    start: date,
    end: date,
    rules: Iterable[Any],
    shift_names: Sequence[str],
) -> Dict[str, Any]:
    """Point-in-time snapshot of the holiday rules that affect [start, end]."""
    recurring, ranged = split_rules(rules)
    active_recurring = [rule for rule in recurring if rule.is_active]
    overlapping_ranged = [
        rule for rule in ranged
        if rule.is_active and rule.start_date <= end and rule.end_date >= start
    ]

    return {
        "recurring_holidays": [
            {"name": rule.name, "day_of_week": rule.day_of_week}
            for rule in active_recurring
        ],
        "non_recurring_holidays": [
            {
                "name": rule.name,
                "start_date": rule.start_date.isoformat(),
                "end_date": rule.end_date.isoformat(),
            }
            for rule in overlapping_ranged
        ],
        "computed_days_off": resolve_days_off(start, end, active_recurring, overlapping_ranged, shift_names),
    }


def empty_snapshot() -> Dict[str, Any]:
    return {"recurring_holidays": [], "non_recurring_holidays": [], "computed_days_off": []}


def find_day_off(snapshot: Optional[Dict[str, Any]], day: date) -> Optional[Dict[str, Any]]:
    if not snapshot:
        return None
    key = day.isoformat()
    for entry in snapshot.get("computed_days_off", []):
        if entry.get("date") == key:
            return entry
    return None


def is_holiday_from_snapshot(day: date, snapshot: Optional[Dict[str, Any]]) -> bool:
    """True while `day` is listed in the snapshot's computed days off."""
    return find_day_off(snapshot, day) is not None


def is_shift_overridden(snapshot: Optional[Dict[str, Any]], day: date, shift_name: str) -> bool:
    entry = find_day_off(snapshot, day)
    if entry is None:
        return False
    state = entry.get("shifts", {}).get(shift_name)
    return bool(state and state.get("is_overridden"))


def mark_shift_overridden(
    snapshot: Dict[str, Any],
    day: date,
    shift_name: str,
    overridden_at: datetime,
    note: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Copy of `snapshot` with (day, shift_name) flagged as overridden. The date
    entry is dropped once every shift it tracks is overridden.
    """
    updated = copy.deepcopy(snapshot)
    key = day.isoformat()
    remaining = []
    for entry in updated.get("computed_days_off", []):
        if entry.get("date") == key:
            shifts = entry.setdefault("shifts", {})
            shifts[shift_name] = {
                "is_overridden": True,
                "overridden_at": overridden_at.isoformat(),
                "note": note,
            }
            if all(state.get("is_overridden") for state in shifts.values()):
                continue
        remaining.append(entry)
    updated["computed_days_off"] = remaining
    return updated
