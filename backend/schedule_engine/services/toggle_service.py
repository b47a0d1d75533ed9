"""
Toggle service: enables or disables a schedule, its shifts or its sub-room and
cascades the flag onto generated slots.
"""

import copy
from typing import Optional, Tuple
from datetime import date
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import NotFoundError, ValidationError
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.schedule_repository import ScheduleRepository
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.models.schedule import Schedule
from schedule_engine.schemas.schedule import ToggleRequest, ToggleResult
from schedule_engine.services.base_service import BaseService
from schedule_engine.utils.civil_time import clamp_range

logger = get_logger(__name__)


class ToggleService(BaseService):
    """Service for schedule, shift and sub-room toggles."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.schedule_repo = ScheduleRepository(session)
        self.slot_repo = SlotRepository(session)

    async def toggle(self, schedule_id: UUID, request: ToggleRequest) -> ToggleResult:
        """
        Apply a toggle.

        `is_active` cascades to every slot of the schedule. Shift and sub-room
        toggles only reach slots inside `request.date_range` (clipped to the
        schedule); a shift's own flag on the schedule changes only when the
        range covers the whole schedule. Everything is validated before
        anything is written.

        Raises:
            NotFoundError: schedule does not exist
            ValidationError: range missing or disjoint, unknown shift or sub-room
        """
        schedule = await self.schedule_repo.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found", details={"schedule_id": str(schedule_id)})

        window = self._validate(schedule, request)

        slots_updated = 0
        if request.is_active is not None:
            schedule.is_active = request.is_active
            slots_updated += await self.slot_repo.set_active(schedule.id, request.is_active)

        if request.shift_toggles:
            date_from, date_to = window
            covers_schedule = date_from == schedule.start_date and date_to == schedule.end_date
            shift_config = copy.deepcopy(schedule.shift_config)
            for toggle in request.shift_toggles:
                slots_updated += await self.slot_repo.set_active(
                    schedule.id,
                    toggle.is_active,
                    shift_name=toggle.shift_name,
                    date_from=date_from,
                    date_to=date_to,
                )
                if covers_schedule:
                    shift_config[toggle.shift_name]["is_active"] = toggle.is_active
            await self.schedule_repo.save_shift_config(schedule, shift_config)

        if request.sub_room_toggle is not None:
            date_from, date_to = window
            slots_updated += await self.slot_repo.set_active(
                schedule.id,
                request.sub_room_toggle.is_active,
                sub_room_id=request.sub_room_toggle.sub_room_id,
                date_from=date_from,
                date_to=date_to,
            )

        await self.session.commit()
        await self.session.refresh(schedule)

        logger.info(
            "Schedule toggled",
            extra={"schedule_id": str(schedule.id), "slots_updated": slots_updated},
        )
        return ToggleResult(
            schedule_id=schedule.id,
            is_active=schedule.is_active,
            slots_updated=slots_updated,
            shift_config=schedule.shift_config,
        )

    def _validate(self, schedule: Schedule, request: ToggleRequest) -> Optional[Tuple[date, date]]:
        if not request.shift_toggles and request.sub_room_toggle is None:
            return None

        if request.date_range is None:
            raise ValidationError(
                "A date range is required to toggle shifts or sub-rooms",
                details={"schedule_id": str(schedule.id), "reason": "date_range_required"},
            )

        window = clamp_range(
            request.date_range.start_date,
            request.date_range.end_date,
            schedule.start_date,
            schedule.end_date,
        )
        if window is None:
            raise ValidationError(
                "Date range is outside the schedule",
                details={
                    "schedule_id": str(schedule.id),
                    "start_date": schedule.start_date.isoformat(),
                    "end_date": schedule.end_date.isoformat(),
                    "reason": "outside_schedule",
                },
            )

        for toggle in request.shift_toggles or []:
            if toggle.shift_name not in schedule.shift_config:
                raise ValidationError(
                    f"Unknown shift: {toggle.shift_name}",
                    details={"shift": toggle.shift_name, "reason": "unknown_shift"},
                )

        if request.sub_room_toggle is not None and request.sub_room_toggle.sub_room_id != schedule.sub_room_id:
            raise ValidationError(
                f"Sub-room {request.sub_room_toggle.sub_room_id} does not belong to this schedule",
                details={"sub_room_id": request.sub_room_toggle.sub_room_id, "reason": "unknown_sub_room"},
            )

        return window
