"""
Schedule repository for database operations.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from schedule_engine.core.exceptions import DuplicateKeyError
from schedule_engine.db.repositories.base_repository import BaseRepository
from schedule_engine.models.schedule import Schedule


def _sub_room_clause(sub_room_id: Optional[str]):
    if sub_room_id is None:
        return Schedule.sub_room_id.is_(None)
    return Schedule.sub_room_id == sub_room_id


class ScheduleRepository(BaseRepository[Schedule]):
    """Repository for schedule operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Schedule, session)

    async def get_by_key(
        self,
        room_id: str,
        sub_room_id: Optional[str],
        month: int,
        year: int,
    ) -> Optional[Schedule]:
        """Get the schedule for one (room, sub-room, month, year) key."""
        result = await self.session.execute(
            select(Schedule).where(
                and_(
                    Schedule.room_id == room_id,
                    _sub_room_clause(sub_room_id),
                    Schedule.month == month,
                    Schedule.year == year,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create_unique(self, **kwargs) -> Schedule:
        """
        Insert a schedule. A concurrent writer that already inserted the same
        key surfaces as DuplicateKeyError; the session must be rolled back.
        """
        try:
            return await self.create(**kwargs)
        except IntegrityError as exc:
            raise DuplicateKeyError(
                "Schedule already exists for this room and month",
                details={
                    "room_id": kwargs.get("room_id"),
                    "sub_room_id": kwargs.get("sub_room_id"),
                    "month": kwargs.get("month"),
                    "year": kwargs.get("year"),
                },
            ) from exc

    async def list_filtered(
        self,
        room_id: Optional[str] = None,
        sub_room_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Schedule]:
        """List schedules with optional filters, newest month first."""
        query = select(Schedule)
        if room_id is not None:
            query = query.where(Schedule.room_id == room_id)
        if sub_room_id is not None:
            query = query.where(Schedule.sub_room_id == sub_room_id)
        if month is not None:
            query = query.where(Schedule.month == month)
        if year is not None:
            query = query.where(Schedule.year == year)
        query = (
            query.order_by(Schedule.year, Schedule.month, Schedule.sub_room_id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_room_month(self, room_id: str, month: int, year: int) -> List[Schedule]:
        """Every scope's schedule of a room for one month."""
        result = await self.session.execute(
            select(Schedule).where(
                Schedule.room_id == room_id,
                Schedule.month == month,
                Schedule.year == year,
            )
        )
        return list(result.scalars().all())

    async def list_months_for_room(self, room_id: str, ending_on_or_after: date) -> List[Tuple[int, int]]:
        """Distinct (month, year) pairs with schedules for a room that have not ended."""
        result = await self.session.execute(
            select(Schedule.year, Schedule.month)
            .where(
                Schedule.room_id == room_id,
                Schedule.end_date >= ending_on_or_after,
            )
            .group_by(Schedule.year, Schedule.month)
            .order_by(Schedule.year, Schedule.month)
        )
        return [(month, year) for year, month in result.all()]

    async def save_shift_config(self, schedule: Schedule, shift_config: Dict[str, Any]) -> Schedule:
        """Replace the schedule's shift config document."""
        schedule.shift_config = shift_config
        flag_modified(schedule, "shift_config")
        await self.session.flush()
        return schedule

    async def save_holiday_snapshot(self, schedule: Schedule, snapshot: Dict[str, Any]) -> Schedule:
        """Replace the schedule's holiday snapshot document."""
        schedule.holiday_snapshot = snapshot
        flag_modified(schedule, "holiday_snapshot")
        await self.session.flush()
        return schedule

    async def get_many(self, ids: List[UUID]) -> List[Schedule]:
        if not ids:
            return []
        result = await self.session.execute(select(Schedule).where(Schedule.id.in_(ids)))
        return list(result.scalars().all())
