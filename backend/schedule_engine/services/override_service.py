"""
Holiday override service.

An override opens shifts on a date that a schedule's stored holiday snapshot
marks as off. The snapshot is the only source consulted; live holiday rules are
never re-resolved for an existing schedule.
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import AppException, NotFoundError, ValidationError
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.schedule_repository import ScheduleRepository
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.models.schedule import Schedule
from schedule_engine.schemas.schedule import (
    BatchOverrideItem,
    BatchOverrideReport,
    OverrideResult,
    ShiftOutcome,
)
from schedule_engine.services.base_service import BaseService
from schedule_engine.services.slot_factory_service import SlotFactoryService
from schedule_engine.utils.civil_time import civil_date, civil_now
from schedule_engine.utils.holidays import find_day_off, is_shift_overridden, mark_shift_overridden

logger = get_logger(__name__)

NOT_A_HOLIDAY = "not_a_holiday"
OUTSIDE_SCHEDULE = "outside_schedule"
DATE_IN_PAST = "date_in_past"
SHIFT_INACTIVE = "shift_inactive"
ALREADY_GENERATED = "already_generated"
ALREADY_OVERRIDDEN = "already_overridden"
UNKNOWN_SHIFT = "unknown_shift"
SLOT_INSERT_FAILED = "slot_insert_failed"


class OverrideService(BaseService):
    """Service for holiday overrides."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.schedule_repo = ScheduleRepository(session)
        self.slot_repo = SlotRepository(session)
        self.slot_factory = SlotFactoryService(session)

    async def create_override(
        self,
        schedule_id: UUID,
        day: date,
        shift_names: Sequence[str],
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OverrideResult:
        """
        Create slots for `shift_names` on a holiday of one schedule.

        Shifts that already have slots on that date, are inactive on the
        schedule or were overridden before are reported as skipped. Each shift
        commits on its own, so a shift whose insert fails is reported as failed
        while the shifts before it keep their slots.

        Raises:
            NotFoundError: schedule does not exist
            ValidationError: date is outside the schedule, in the past, or not a day off
        """
        schedule = await self.schedule_repo.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found", details={"schedule_id": str(schedule_id)})

        self._validate_date(schedule, day, now or civil_now())

        outcomes = []
        for name in dict.fromkeys(shift_names):
            outcomes.append(await self._override_shift(schedule, day, name, note))

        slots_created = sum(outcome.slots_created for outcome in outcomes)
        if slots_created:
            logger.info(
                "Holiday override created",
                extra={"schedule_id": str(schedule.id), "date": day.isoformat(), "slots_created": slots_created},
            )
        return OverrideResult(schedule_id=schedule.id, date=day, slots_created=slots_created, shifts=outcomes)

    def _validate_date(self, schedule: Schedule, day: date, now: datetime) -> None:
        if day < schedule.start_date or day > schedule.end_date:
            raise ValidationError(
                f"{day.isoformat()} is outside the schedule",
                details={
                    "schedule_id": str(schedule.id),
                    "start_date": schedule.start_date.isoformat(),
                    "end_date": schedule.end_date.isoformat(),
                    "reason": OUTSIDE_SCHEDULE,
                },
            )
        if day < civil_date(now):
            raise ValidationError(
                f"{day.isoformat()} is in the past",
                details={"schedule_id": str(schedule.id), "reason": DATE_IN_PAST},
            )
        if find_day_off(schedule.holiday_snapshot, day) is None:
            raise ValidationError(
                f"{day.isoformat()} is not a holiday for this schedule",
                details={"schedule_id": str(schedule.id), "reason": NOT_A_HOLIDAY},
            )

    async def _override_shift(
        self,
        schedule: Schedule,
        day: date,
        shift_name: str,
        note: Optional[str],
    ) -> ShiftOutcome:
        snapshot = schedule.shift_config.get(shift_name)
        if snapshot is None:
            return ShiftOutcome(shift_name=shift_name, status="skipped", reason=UNKNOWN_SHIFT)
        if not snapshot.get("is_active"):
            return ShiftOutcome(shift_name=shift_name, status="skipped", reason=SHIFT_INACTIVE)
        if is_shift_overridden(schedule.holiday_snapshot, day, shift_name):
            return ShiftOutcome(shift_name=shift_name, status="skipped", reason=ALREADY_OVERRIDDEN)
        if await self.slot_repo.exists_for(schedule.id, day, shift_name):
            return ShiftOutcome(shift_name=shift_name, status="skipped", reason=ALREADY_GENERATED)

        try:
            slots = await self.slot_factory.generate_slots(
                schedule_id=schedule.id,
                room_id=schedule.room_id,
                sub_room_id=schedule.sub_room_id,
                shift_name=shift_name,
                shift_start=snapshot["start_time"],
                shift_end=snapshot["end_time"],
                slot_duration=snapshot["slot_duration"],
                range_start=day,
                range_end=day,
                holiday_snapshot=schedule.holiday_snapshot,
                skip_holidays=False,
                is_holiday_override=True,
                is_active=bool(schedule.is_active and schedule.is_active_sub_room),
            )
            updated = mark_shift_overridden(
                schedule.holiday_snapshot, day, shift_name, datetime.now(tz=timezone.utc), note
            )
            await self.schedule_repo.save_holiday_snapshot(schedule, updated)
            await self.session.commit()
        except (AppException, SQLAlchemyError) as exc:
            await self.rollback_and_refresh(schedule)
            logger.error(
                f"Override failed for shift {shift_name}",
                extra={"schedule_id": str(schedule.id), "date": day.isoformat(), "shift": shift_name, "error": str(exc)},
            )
            reason = SLOT_INSERT_FAILED if isinstance(exc, SQLAlchemyError) else self.reason_of(exc)
            return ShiftOutcome(shift_name=shift_name, status="failed", reason=reason)

        return ShiftOutcome(shift_name=shift_name, status="generated", slots_created=len(slots))

    async def batch_override(
        self,
        schedule_ids: Sequence[UUID],
        day: date,
        shift_names: Sequence[str],
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BatchOverrideReport:
        """
        Apply the same override to several schedules. Never raises for a
        single schedule; every schedule gets an item with a status and reason.
        """
        now = now or civil_now()
        report = BatchOverrideReport(date=day)

        for schedule_id in dict.fromkeys(schedule_ids):
            item = BatchOverrideItem(schedule_id=schedule_id, status="failed")
            try:
                result = await self.create_override(schedule_id, day, shift_names, note, now)
            except ValidationError as exc:
                item.status = "skipped"
                item.reason = self.reason_of(exc)
            except (AppException, SQLAlchemyError) as exc:
                item.reason = self.reason_of(exc)
                logger.warning(
                    "Override failed",
                    extra={"schedule_id": str(schedule_id), "date": day.isoformat(), "error": str(exc)},
                )
            else:
                item.shifts = result.shifts
                item.slots_created = result.slots_created
                failed = [outcome for outcome in result.shifts if outcome.status == "failed"]
                if result.slots_created:
                    item.status = "succeeded"
                elif failed:
                    item.status = "failed"
                else:
                    item.status = "skipped"
                if failed or not result.slots_created:
                    item.reason = ",".join(_unique_reasons(failed or result.shifts))

            report.items.append(item)
            report.slots_created += item.slots_created
            if item.status == "succeeded":
                report.succeeded += 1
            elif item.status == "skipped":
                report.skipped += 1
            else:
                report.failed += 1

        return report


def _unique_reasons(outcomes: List[ShiftOutcome]) -> List[str]:
    return list(dict.fromkeys(outcome.reason for outcome in outcomes if outcome.reason))
