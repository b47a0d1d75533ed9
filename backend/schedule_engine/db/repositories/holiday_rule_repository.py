"""
Holiday rule repository for database operations.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.repositories.base_repository import BaseRepository
from schedule_engine.models.schedule_config import HolidayRule


class HolidayRuleRepository(BaseRepository[HolidayRule]):
    """Repository for holiday rule operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(HolidayRule, session)

    async def list_all(self, is_recurring: Optional[bool] = None) -> List[HolidayRule]:
        query = select(HolidayRule)
        if is_recurring is not None:
            query = query.where(HolidayRule.is_recurring == is_recurring)
        query = query.order_by(HolidayRule.is_recurring.desc(), HolidayRule.day_of_week, HolidayRule.start_date)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_affecting(self, start: date, end: date) -> List[HolidayRule]:
        """Active recurring rules plus active ranged rules overlapping [start, end]."""
        result = await self.session.execute(
            select(HolidayRule).where(
                HolidayRule.is_active == True,  # noqa: E712
                or_(
                    HolidayRule.is_recurring == True,  # noqa: E712
                    and_(
                        HolidayRule.start_date <= end,
                        HolidayRule.end_date >= start,
                    ),
                ),
            )
        )
        return list(result.scalars().all())

    async def mark_used(self, rule_ids: List[UUID]) -> int:
        """Flag ranged rules that have been captured in a snapshot."""
        if not rule_ids:
            return 0
        result = await self.session.execute(
            update(HolidayRule)
            .where(HolidayRule.id.in_(rule_ids), HolidayRule.is_recurring == False)  # noqa: E712
            .values(has_been_used=True)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount
