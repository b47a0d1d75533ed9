"""
Schedule generation service.

Generation is idempotent by (room, sub-room, month, year): an existing schedule
is never duplicated. Its missing shifts are filled in instead, which is also how
a run interrupted between "slots created" and "shift marked generated" recovers.
"""

import copy
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import (
    AppException,
    ConfigurationError,
    DependencyUnavailableError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.holiday_rule_repository import HolidayRuleRepository
from schedule_engine.db.repositories.schedule_config_repository import ScheduleConfigRepository
from schedule_engine.db.repositories.schedule_repository import ScheduleRepository
from schedule_engine.models.schedule import Schedule
from schedule_engine.models.schedule_config import HolidayRule, ScheduleConfig, ShiftDefinition
from schedule_engine.schemas.room import RoomInfo, RoomScope
from schedule_engine.schemas.schedule import (
    AddMissingShiftsResult,
    MonthGenerationResult,
    MonthStatus,
    QuarterStatusResponse,
    RoomGenerationItem,
    RoomGenerationReport,
    ShiftOutcome,
)
from schedule_engine.services.base_service import BaseService
from schedule_engine.services.slot_factory_service import SlotFactoryService
from schedule_engine.utils.civil_time import civil_date, civil_now, minutes_between
from schedule_engine.utils.holidays import build_holiday_snapshot
from schedule_engine.utils.quarters import month_bounds, months_in_quarter
from schedule_engine.utils.slot_windows import validate_slot_duration

logger = get_logger(__name__)

MONTH_IN_PAST = "month_in_past"
NO_DAYS_LEFT = "no_days_left"
ALREADY_GENERATED = "already_generated"
ADDED_MISSING_SHIFTS = "added_missing_shifts"
SHIFT_INACTIVE = "shift_inactive"
SCHEDULE_ENDED = "schedule_ended"
UNKNOWN_SHIFT = "unknown_shift"
SLOT_INSERT_FAILED = "slot_insert_failed"


def slot_duration_for(
    shift: ShiftDefinition,
    unit_duration: int,
    has_sub_rooms: bool,
    explicit: Optional[int] = None,
) -> int:
    """
    Slot length for a shift: an explicit value wins, rooms with sub-rooms use
    the global unit duration and single rooms get one slot per shift.
    """
    if explicit:
        return explicit
    if has_sub_rooms:
        return unit_duration
    return minutes_between(shift.start_time, shift.end_time)


def build_shift_config(
    config: ScheduleConfig,
    has_sub_rooms: bool,
    slot_duration: Optional[int] = None,
) -> Dict[str, Dict[str, Any]]:
    """Snapshot of every configured shift, none generated yet."""
    return {
        shift.name: {
            "label": shift.label,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "slot_duration": slot_duration_for(shift, config.unit_duration, has_sub_rooms, slot_duration),
            "is_active": bool(shift.is_active),
            "is_generated": False,
        }
        for shift in config.shifts
    }


def is_scope_generated(schedule: Optional[Schedule]) -> bool:
    """Schedule exists and every active shift in it has its slots."""
    if schedule is None:
        return False
    return all(
        snapshot.get("is_generated")
        for snapshot in (schedule.shift_config or {}).values()
        if snapshot.get("is_active")
    )


class ScheduleGenerationService(BaseService):
    """Service for generating schedules and their slots."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.session = session
        self.room_directory = room_directory
        self.event_publisher = event_publisher
        self.schedule_repo = ScheduleRepository(session)
        self.config_repo = ScheduleConfigRepository(session)
        self.holiday_repo = HolidayRuleRepository(session)
        self.slot_factory = SlotFactoryService(session)

    async def load_global_config(self) -> ScheduleConfig:
        """
        Global shift config.

        Raises:
            ConfigurationError: config was never set up or has no shifts
            DependencyUnavailableError: config store could not be read
        """
        try:
            config = await self.config_repo.get_singleton()
        except SQLAlchemyError as exc:
            raise DependencyUnavailableError("Schedule config could not be read") from exc
        if config is None or not config.shifts:
            raise ConfigurationError("Schedule config has not been set up")
        return config

    async def load_holiday_rules(self, start: date, end: date) -> List[HolidayRule]:
        try:
            return await self.holiday_repo.list_affecting(start, end)
        except SQLAlchemyError as exc:
            raise DependencyUnavailableError("Holiday rules could not be read") from exc

    def resolve_scope(self, room: RoomInfo, sub_room_id: Optional[str]) -> Tuple[RoomScope, bool]:
        """
        Generation scope for a room and whether its sub-room is currently active.

        Raises:
            ValidationError: sub-room does not match the room's shape
        """
        if room.has_sub_rooms:
            if sub_room_id is None:
                raise ValidationError(
                    f"Room {room.id} has sub-rooms; a sub_room_id is required",
                    details={"room_id": room.id, "reason": "sub_room_required"},
                )
            sub_room = room.find_sub_room(sub_room_id)
            if sub_room is None:
                raise ValidationError(
                    f"Sub-room {sub_room_id} does not belong to room {room.id}",
                    details={"room_id": room.id, "sub_room_id": sub_room_id, "reason": "unknown_sub_room"},
                )
            return RoomScope(room.id, sub_room.id), sub_room.is_active

        if sub_room_id is not None:
            raise ValidationError(
                f"Room {room.id} has no sub-rooms",
                details={"room_id": room.id, "sub_room_id": sub_room_id, "reason": "room_has_no_sub_rooms"},
            )
        return RoomScope(room.id, None), True

    def requested_shifts(self, config: ScheduleConfig, shift_names: Optional[Sequence[str]]) -> List[str]:
        known = [shift.name for shift in config.shifts]
        if not shift_names:
            return known
        unknown = [name for name in shift_names if name not in known]
        if unknown:
            raise ValidationError(
                f"Unknown shift(s): {', '.join(unknown)}",
                details={"shifts": unknown, "reason": UNKNOWN_SHIFT},
            )
        return list(dict.fromkeys(shift_names))

    async def get_room(self, room_id: str) -> RoomInfo:
        room = await self.room_directory.get_room_by_id(room_id)
        if not room.is_active:
            raise ValidationError(f"Room {room_id} is inactive", details={"room_id": room_id, "reason": "room_inactive"})
        return room

    async def generate_for_room_month(
        self,
        room_id: str,
        sub_room_id: Optional[str],
        month: int,
        year: int,
        shift_names: Optional[Sequence[str]] = None,
        slot_duration: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MonthGenerationResult:
        """Generate one (room, sub-room, month, year) schedule and publish events."""
        room = await self.get_room(room_id)
        config = await self.load_global_config()
        result = await self._generate_month(room, sub_room_id, month, year, config, shift_names, slot_duration, now)
        if result.slots_created > 0:
            await self._publish_generated(room.id, [sub_room_id] if sub_room_id else [])
        return result

    async def _generate_month(
        self,
        room: RoomInfo,
        sub_room_id: Optional[str],
        month: int,
        year: int,
        config: ScheduleConfig,
        shift_names: Optional[Sequence[str]] = None,
        slot_duration: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MonthGenerationResult:
        now = now or civil_now()
        tomorrow = civil_date(now) + timedelta(days=1)
        first_day, last_day = month_bounds(month, year)

        if last_day < civil_date(now):
            raise ValidationError(
                f"{month:02d}/{year} is in the past",
                details={"month": month, "year": year, "reason": MONTH_IN_PAST},
            )
        if last_day < tomorrow:
            raise ValidationError(
                f"{month:02d}/{year} has no days left to generate",
                details={"month": month, "year": year, "reason": NO_DAYS_LEFT},
            )

        scope, sub_room_active = self.resolve_scope(room, sub_room_id)
        requested = self.requested_shifts(config, shift_names)

        existing = await self.schedule_repo.get_by_key(scope.room_id, scope.sub_room_id, month, year)
        if existing is not None:
            return await self._complete_existing(existing, requested, now)

        shift_config = build_shift_config(config, room.has_sub_rooms, slot_duration)
        for name in requested:
            snapshot = shift_config[name]
            if snapshot["is_active"]:
                validate_slot_duration(name, snapshot["start_time"], snapshot["end_time"], snapshot["slot_duration"])

        start_date = max(first_day, tomorrow)
        rules = await self.load_holiday_rules(start_date, last_day)
        holiday_snapshot = build_holiday_snapshot(
            start_date, last_day, rules, [shift.name for shift in config.shifts]
        )

        try:
            schedule = await self.schedule_repo.create_unique(
                room_id=scope.room_id,
                sub_room_id=scope.sub_room_id,
                month=month,
                year=year,
                start_date=start_date,
                end_date=last_day,
                shift_config=shift_config,
                holiday_snapshot=holiday_snapshot,
                is_active_sub_room=sub_room_active,
                is_active=True,
            )
            await self.holiday_repo.mark_used([rule.id for rule in rules if not rule.is_recurring])
            await self.session.commit()
        except DuplicateKeyError:
            await self.session.rollback()
            existing = await self.schedule_repo.get_by_key(scope.room_id, scope.sub_room_id, month, year)
            if existing is None:
                raise
            logger.info(
                "Schedule created concurrently, completing it instead",
                extra={"room_id": scope.room_id, "sub_room_id": scope.sub_room_id, "month": month, "year": year},
            )
            return await self._complete_existing(existing, requested, now)

        logger.info(
            "Schedule created",
            extra={
                "schedule_id": str(schedule.id),
                "room_id": scope.room_id,
                "sub_room_id": scope.sub_room_id,
                "month": month,
                "year": year,
                "start_date": start_date.isoformat(),
                "days_off": len(holiday_snapshot["computed_days_off"]),
            },
        )

        outcomes = []
        for name in requested:
            if not schedule.shift_config[name]["is_active"]:
                outcomes.append(ShiftOutcome(shift_name=name, status="skipped", reason=SHIFT_INACTIVE))
                continue
            outcomes.append(await self._generate_shift(schedule, name, start_date, schedule.end_date))

        return MonthGenerationResult(
            schedule_id=schedule.id,
            room_id=scope.room_id,
            sub_room_id=scope.sub_room_id,
            month=month,
            year=year,
            created=True,
            slots_created=sum(outcome.slots_created for outcome in outcomes),
            shifts=outcomes,
        )

    async def _complete_existing(
        self,
        schedule: Schedule,
        requested: Sequence[str],
        now: datetime,
    ) -> MonthGenerationResult:
        missing = [
            name for name in requested
            if name in schedule.shift_config
            and schedule.shift_config[name].get("is_active")
            and not schedule.shift_config[name].get("is_generated")
        ]
        if not missing:
            return MonthGenerationResult(
                schedule_id=schedule.id,
                room_id=schedule.room_id,
                sub_room_id=schedule.sub_room_id,
                month=schedule.month,
                year=schedule.year,
                created=False,
                reason=ALREADY_GENERATED,
                shifts=[
                    ShiftOutcome(shift_name=name, status="skipped", reason=ALREADY_GENERATED)
                    for name in requested
                ],
            )

        outcomes = await self._fill_shifts(schedule, requested, None, now)
        return MonthGenerationResult(
            schedule_id=schedule.id,
            room_id=schedule.room_id,
            sub_room_id=schedule.sub_room_id,
            month=schedule.month,
            year=schedule.year,
            created=False,
            reason=ADDED_MISSING_SHIFTS,
            slots_created=sum(outcome.slots_created for outcome in outcomes),
            shifts=outcomes,
        )

    async def add_missing_shifts(
        self,
        room_id: str,
        sub_room_id: Optional[str],
        month: int,
        year: int,
        shift_names: Sequence[str],
        partial_start_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AddMissingShiftsResult:
        """
        Generate the requested shifts that an existing schedule has not
        generated yet, using the shift windows stored on the schedule.
        """
        schedule = await self.schedule_repo.get_by_key(room_id, sub_room_id, month, year)
        if schedule is None:
            raise NotFoundError(
                "Schedule not found",
                details={"room_id": room_id, "sub_room_id": sub_room_id, "month": month, "year": year},
            )

        outcomes = await self._fill_shifts(schedule, shift_names, partial_start_date, now or civil_now())
        return AddMissingShiftsResult(
            schedule_id=schedule.id,
            slots_created=sum(outcome.slots_created for outcome in outcomes),
            shifts=outcomes,
        )

    async def _fill_shifts(
        self,
        schedule: Schedule,
        shift_names: Iterable[str],
        partial_start_date: Optional[date],
        now: datetime,
    ) -> List[ShiftOutcome]:
        tomorrow = civil_date(now) + timedelta(days=1)
        candidates = [schedule.start_date, tomorrow]
        if partial_start_date is not None:
            candidates.append(partial_start_date)
        effective_start = max(candidates)

        outcomes = []
        for name in dict.fromkeys(shift_names):
            snapshot = schedule.shift_config.get(name)
            if snapshot is None:
                outcomes.append(ShiftOutcome(shift_name=name, status="skipped", reason=UNKNOWN_SHIFT))
            elif snapshot.get("is_generated"):
                outcomes.append(ShiftOutcome(shift_name=name, status="skipped", reason=ALREADY_GENERATED))
            elif not snapshot.get("is_active"):
                outcomes.append(ShiftOutcome(shift_name=name, status="skipped", reason=SHIFT_INACTIVE))
            elif effective_start > schedule.end_date:
                outcomes.append(ShiftOutcome(shift_name=name, status="skipped", reason=SCHEDULE_ENDED))
            else:
                outcomes.append(await self._generate_shift(schedule, name, effective_start, schedule.end_date))
        return outcomes

    async def _generate_shift(
        self,
        schedule: Schedule,
        shift_name: str,
        range_start: date,
        range_end: date,
    ) -> ShiftOutcome:
        """
        Create one shift's slots and mark it generated in the same commit, so
        a failed insert never leaves the shift flagged as generated.
        """
        snapshot = schedule.shift_config[shift_name]
        schedule_id = schedule.id
        try:
            slots = await self.slot_factory.generate_slots(
                schedule_id=schedule_id,
                room_id=schedule.room_id,
                sub_room_id=schedule.sub_room_id,
                shift_name=shift_name,
                shift_start=snapshot["start_time"],
                shift_end=snapshot["end_time"],
                slot_duration=snapshot["slot_duration"],
                range_start=range_start,
                range_end=range_end,
                holiday_snapshot=schedule.holiday_snapshot,
                is_active=bool(schedule.is_active and schedule.is_active_sub_room),
            )
            shift_config = copy.deepcopy(schedule.shift_config)
            shift_config[shift_name]["is_generated"] = True
            await self.schedule_repo.save_shift_config(schedule, shift_config)
            await self.session.commit()
        except ConfigurationError:
            await self.rollback_and_refresh(schedule)
            raise
        except SQLAlchemyError as exc:
            await self.rollback_and_refresh(schedule)
            logger.error(
                f"Slot generation failed for shift {shift_name}",
                extra={"schedule_id": str(schedule_id), "shift": shift_name, "error": str(exc)},
            )
            return ShiftOutcome(shift_name=shift_name, status="failed", reason=SLOT_INSERT_FAILED)

        logger.info(
            f"Generated {len(slots)} slots for shift {shift_name}",
            extra={"schedule_id": str(schedule_id), "shift": shift_name, "count": len(slots)},
        )
        return ShiftOutcome(shift_name=shift_name, status="generated", slots_created=len(slots))

    async def generate_for_room_quarter(
        self,
        room_id: str,
        quarter: int,
        year: int,
        shift_names: Optional[Sequence[str]] = None,
        slot_duration: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> RoomGenerationReport:
        """
        Generate every scope of a room for each month of a quarter.

        Per-(scope, month) failures are recorded in the report; only a missing
        room or global config aborts the call.
        """
        room = await self.get_room(room_id)
        config = await self.load_global_config()
        scopes = [sub_room.id for sub_room in room.sub_rooms] if room.has_sub_rooms else [None]
        months = [(month, year) for month in months_in_quarter(quarter)]

        report = RoomGenerationReport(room_id=room.id, quarter=quarter, year=year)
        await self._generate_scopes(report, room, scopes, months, config, shift_names, slot_duration, now)
        if report.succeeded:
            await self._publish_generated(room.id, [scope for scope in scopes if scope is not None])

        logger.info(
            f"Quarter Q{quarter}/{year} generated for room {room.id}",
            extra={
                "room_id": room.id,
                "succeeded": report.succeeded,
                "skipped": report.skipped,
                "failed": report.failed,
                "slots_created": report.slots_created,
            },
        )
        return report

    async def generate_for_sub_rooms(
        self,
        room_id: str,
        sub_room_ids: Sequence[str],
        months: Sequence[Tuple[int, int]],
        now: Optional[datetime] = None,
    ) -> RoomGenerationReport:
        """Generate the given months for sub-rooms that joined a room later."""
        room = await self.get_room(room_id)
        config = await self.load_global_config()

        report = RoomGenerationReport(room_id=room.id)
        await self._generate_scopes(report, room, list(sub_room_ids), months, config, None, None, now)
        if report.succeeded:
            await self._publish_generated(room.id, list(sub_room_ids))
        return report

    async def _generate_scopes(
        self,
        report: RoomGenerationReport,
        room: RoomInfo,
        scopes: Sequence[Optional[str]],
        months: Sequence[Tuple[int, int]],
        config: ScheduleConfig,
        shift_names: Optional[Sequence[str]],
        slot_duration: Optional[int],
        now: Optional[datetime],
    ) -> None:
        for month, year in months:
            for sub_room_id in scopes:
                item = RoomGenerationItem(sub_room_id=sub_room_id, month=month, year=year, status="failed")
                try:
                    result = await self._generate_month(
                        room, sub_room_id, month, year, config, shift_names, slot_duration, now
                    )
                except ValidationError as exc:
                    reason = self.reason_of(exc)
                    item.status = "skipped" if reason in (MONTH_IN_PAST, NO_DAYS_LEFT) else "failed"
                    item.reason = reason
                except AppException as exc:
                    item.reason = self.reason_of(exc)
                    logger.warning(
                        f"Generation failed for room {room.id}",
                        extra={"room_id": room.id, "sub_room_id": sub_room_id, "month": month, "year": year,
                               "error": exc.message},
                    )
                except SQLAlchemyError as exc:
                    await self.session.rollback()
                    item.reason = type(exc).__name__
                    logger.error(
                        f"Generation failed for room {room.id}",
                        extra={"room_id": room.id, "sub_room_id": sub_room_id, "month": month, "year": year,
                               "error": str(exc)},
                    )
                else:
                    item.schedule_id = result.schedule_id
                    item.slots_created = result.slots_created
                    failed_shifts = [outcome for outcome in result.shifts if outcome.status == "failed"]
                    if failed_shifts:
                        item.reason = failed_shifts[0].reason
                    elif result.created or result.slots_created:
                        item.status = "succeeded"
                        item.reason = result.reason
                    else:
                        item.status = "skipped"
                        item.reason = result.reason

                report.items.append(item)
                report.slots_created += item.slots_created
                if item.status == "succeeded":
                    report.succeeded += 1
                elif item.status == "skipped":
                    report.skipped += 1
                else:
                    report.failed += 1

    async def quarter_status(
        self,
        room_id: str,
        quarter: int,
        year: int,
        now: Optional[datetime] = None,
    ) -> QuarterStatusResponse:
        """Which (scope, month) schedules of a room's quarter are complete."""
        room = await self.room_directory.get_room_by_id(room_id)
        return await self.quarter_status_for(room, quarter, year, now)

    async def quarter_status_for(
        self,
        room: RoomInfo,
        quarter: int,
        year: int,
        now: Optional[datetime] = None,
    ) -> QuarterStatusResponse:
        tomorrow = civil_date(now or civil_now()) + timedelta(days=1)
        scopes = [sub_room.id for sub_room in room.sub_rooms] if room.has_sub_rooms else [None]

        months = []
        for month in months_in_quarter(quarter):
            schedules = {
                schedule.sub_room_id: schedule
                for schedule in await self.schedule_repo.list_by_room_month(room.id, month, year)
            }
            missing = [scope for scope in scopes if not is_scope_generated(schedules.get(scope))]
            _, last_day = month_bounds(month, year)
            is_past = last_day < tomorrow
            months.append(MonthStatus(
                month=month,
                year=year,
                scopes_total=len(scopes),
                scopes_generated=len(scopes) - len(missing),
                missing_sub_room_ids=missing,
                is_past=is_past,
                is_complete=is_past or not missing,
            ))

        return QuarterStatusResponse(
            room_id=room.id,
            quarter=quarter,
            year=year,
            months=months,
            is_complete=all(month.is_complete for month in months),
        )

    async def _publish_generated(self, room_id: str, sub_room_ids: List[str]) -> None:
        if self.event_publisher is None:
            return
        await self.event_publisher.room_schedule_updated(
            room_id, datetime.now(tz=timezone.utc)
        )
        if sub_room_ids:
            await self.event_publisher.sub_room_schedule_created(room_id, sub_room_ids)
