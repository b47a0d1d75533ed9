"""
Slot repository for database operations.
"""

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.repositories.base_repository import BaseRepository
from schedule_engine.models.schedule import Slot, SlotStatus


class SlotRepository(BaseRepository[Slot]):
    """Repository for slot operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Slot, session)

    async def exists_for(self, schedule_id: UUID, day: date, shift_name: str) -> bool:
        """Whether any slot exists for (schedule, date, shift)."""
        result = await self.session.execute(
            select(func.count(Slot.id)).where(
                Slot.schedule_id == schedule_id,
                Slot.date == day,
                Slot.shift_name == shift_name,
            )
        )
        return (result.scalar() or 0) > 0

    async def count_by_schedule(self, schedule_id: UUID, shift_name: Optional[str] = None) -> int:
        query = select(func.count(Slot.id)).where(Slot.schedule_id == schedule_id)
        if shift_name is not None:
            query = query.where(Slot.shift_name == shift_name)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def count_booked(self, schedule_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(Slot.id)).where(
                Slot.schedule_id == schedule_id,
                or_(Slot.status == SlotStatus.BOOKED, Slot.appointment_id.is_not(None)),
            )
        )
        return result.scalar() or 0

    async def list_by_schedule(
        self,
        schedule_id: UUID,
        day: Optional[date] = None,
        shift_name: Optional[str] = None,
        skip: int = 0,
        limit: int = 1000,
    ) -> List[Slot]:
        """List a schedule's slots in time order."""
        query = select(Slot).where(Slot.schedule_id == schedule_id)
        if day is not None:
            query = query.where(Slot.date == day)
        if shift_name is not None:
            query = query.where(Slot.shift_name == shift_name)
        query = query.order_by(Slot.start_time, Slot.shift_name).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_ids(self, slot_ids: List[UUID]) -> List[Slot]:
        if not slot_ids:
            return []
        result = await self.session.execute(select(Slot).where(Slot.id.in_(slot_ids)))
        return list(result.scalars().all())

    async def find_by_staff_in_window(
        self,
        staff_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> List[Slot]:
        """Slots where the staff member holds either role and that intersect the window."""
        result = await self.session.execute(
            select(Slot)
            .where(
                or_(Slot.dentist_id == staff_id, Slot.nurse_id == staff_id),
                Slot.start_time < window_end,
                Slot.end_time > window_start,
            )
            .order_by(Slot.start_time)
        )
        return list(result.scalars().all())

    async def set_active(
        self,
        schedule_id: UUID,
        is_active: bool,
        shift_name: Optional[str] = None,
        sub_room_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        """Cascade an active flag onto a schedule's slots in one UPDATE."""
        statement = update(Slot).where(Slot.schedule_id == schedule_id)
        if shift_name is not None:
            statement = statement.where(Slot.shift_name == shift_name)
        if sub_room_id is not None:
            statement = statement.where(Slot.sub_room_id == sub_room_id)
        if date_from is not None:
            statement = statement.where(Slot.date >= date_from)
        if date_to is not None:
            statement = statement.where(Slot.date <= date_to)
        result = await self.session.execute(
            statement.values(is_active=is_active).execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount

    async def update_many(self, slot_ids: List[UUID], **values: Any) -> int:
        """Apply the same values to several slots in one UPDATE."""
        if not slot_ids:
            return 0
        result = await self.session.execute(
            update(Slot)
            .where(Slot.id.in_(slot_ids))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount

    async def delete_by_schedule(self, schedule_id: UUID) -> int:
        result = await self.session.execute(
            delete(Slot).where(Slot.schedule_id == schedule_id)
        )
        await self.session.flush()
        return result.rowcount
