"""
Schedule service: reading and deleting generated schedules and their slots.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import ValidationError
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.schedule_repository import ScheduleRepository
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.schemas.schedule import ScheduleResponse
from schedule_engine.schemas.slot import SlotResponse
from schedule_engine.services.base_service import BaseService

logger = get_logger(__name__)


class ScheduleService(BaseService):
    """Service for schedule reads and deletion."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.schedule_repo = ScheduleRepository(session)
        self.slot_repo = SlotRepository(session)

    async def get_schedule(self, schedule_id: UUID) -> Optional[ScheduleResponse]:
        schedule = await self.schedule_repo.get(schedule_id)
        if not schedule:
            return None
        return ScheduleResponse.model_validate(schedule)

    async def list_schedules(
        self,
        room_id: Optional[str] = None,
        sub_room_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[List[ScheduleResponse], int]:
        schedules = await self.schedule_repo.list_filtered(
            room_id=room_id,
            sub_room_id=sub_room_id,
            month=month,
            year=year,
            skip=skip,
            limit=limit,
        )
        return [ScheduleResponse.model_validate(schedule) for schedule in schedules], len(schedules)

    async def list_slots(
        self,
        schedule_id: UUID,
        day: Optional[date] = None,
        shift_name: Optional[str] = None,
        skip: int = 0,
        limit: int = 1000,
    ) -> Optional[tuple[List[SlotResponse], int]]:
        """Slots of a schedule, or None if the schedule does not exist."""
        schedule = await self.schedule_repo.get(schedule_id)
        if not schedule:
            return None
        slots = await self.slot_repo.list_by_schedule(
            schedule_id, day=day, shift_name=shift_name, skip=skip, limit=limit
        )
        return [SlotResponse.model_validate(slot) for slot in slots], len(slots)

    async def delete_schedule(self, schedule_id: UUID) -> bool:
        """
        Delete a schedule with its slots.

        Raises:
            ValidationError: a slot of the schedule is booked
        """
        schedule = await self.schedule_repo.get(schedule_id)
        if not schedule:
            return False

        booked = await self.slot_repo.count_booked(schedule_id)
        if booked:
            raise ValidationError(
                "Schedule has booked slots and cannot be deleted",
                details={"schedule_id": str(schedule_id), "booked_slots": booked, "reason": "has_booked_slots"},
            )

        removed_slots = await self.slot_repo.delete_by_schedule(schedule_id)
        deleted = await self.schedule_repo.delete(schedule_id)
        await self.session.commit()

        logger.info(
            "Schedule deleted",
            extra={"schedule_id": str(schedule_id), "slots_deleted": removed_slots},
        )
        return deleted
