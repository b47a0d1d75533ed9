"""
Slot factory: expands a shift window across a date range into Slot rows.
"""

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.logging import get_logger
from schedule_engine.services.base_service import BaseService
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.models.schedule import Slot, SlotStatus
from schedule_engine.utils.civil_time import iter_days
from schedule_engine.utils.holidays import is_holiday_from_snapshot
from schedule_engine.utils.slot_windows import tile_shift, validate_slot_duration

logger = get_logger(__name__)


class SlotFactoryService(BaseService):
    """Service for creating slots. The caller owns the transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.slot_repo = SlotRepository(session)

    def build_slot_rows(
        self,
        schedule_id: UUID,
        room_id: str,
        sub_room_id: Optional[str],
        shift_name: str,
        shift_start: str,
        shift_end: str,
        slot_duration: int,
        range_start: date,
        range_end: date,
        holiday_snapshot: Optional[Dict[str, Any]],
        skip_holidays: bool = True,
        is_holiday_override: bool = False,
        is_active: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Slot attribute dicts for every non-holiday day in [range_start, range_end].

        Raises:
            ConfigurationError: shift window or slot duration is unusable
        """
        validate_slot_duration(shift_name, shift_start, shift_end, slot_duration)

        rows = []
        for day in iter_days(range_start, range_end):
            if skip_holidays and is_holiday_from_snapshot(day, holiday_snapshot):
                continue
            for start_time, end_time in tile_shift(day, shift_start, shift_end, slot_duration):
                rows.append({
                    "schedule_id": schedule_id,
                    "room_id": room_id,
                    "sub_room_id": sub_room_id,
                    "date": day,
                    "start_time": start_time,
                    "end_time": end_time,
                    "duration_minutes": slot_duration,
                    "shift_name": shift_name,
                    "status": SlotStatus.AVAILABLE,
                    "is_active": is_active,
                    "is_holiday_override": is_holiday_override,
                })
        return rows

    async def generate_slots(
        self,
        schedule_id: UUID,
        room_id: str,
        sub_room_id: Optional[str],
        shift_name: str,
        shift_start: str,
        shift_end: str,
        slot_duration: int,
        range_start: date,
        range_end: date,
        holiday_snapshot: Optional[Dict[str, Any]],
        skip_holidays: bool = True,
        is_holiday_override: bool = False,
        is_active: bool = True,
    ) -> List[Slot]:
        """
        Create the slots of one shift over a date range in a single batch.

        Holidays listed in `holiday_snapshot` are skipped unless
        `skip_holidays` is False (the override path).
        """
        rows = self.build_slot_rows(
            schedule_id=schedule_id,
            room_id=room_id,
            sub_room_id=sub_room_id,
            shift_name=shift_name,
            shift_start=shift_start,
            shift_end=shift_end,
            slot_duration=slot_duration,
            range_start=range_start,
            range_end=range_end,
            holiday_snapshot=holiday_snapshot,
            skip_holidays=skip_holidays,
            is_holiday_override=is_holiday_override,
            is_active=is_active,
        )
        if not rows:
            return []

        slots = await self.slot_repo.create_many(rows)
        logger.debug(
            "Slots generated",
            extra={
                "schedule_id": str(schedule_id),
                "shift": shift_name,
                "count": len(slots),
                "range_start": range_start.isoformat(),
                "range_end": range_end.isoformat(),
            },
        )
        return slots
