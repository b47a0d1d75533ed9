"""
Schedule config repository for database operations.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schedule_engine.db.repositories.base_repository import BaseRepository
from schedule_engine.models.schedule_config import ScheduleConfig, SCHEDULE_CONFIG_SINGLETON


class ScheduleConfigRepository(BaseRepository[ScheduleConfig]):
    """Repository for the global schedule config singleton."""

    def __init__(self, session: AsyncSession):
        super().__init__(ScheduleConfig, session)

    async def get_singleton(self, reload: bool = False) -> Optional[ScheduleConfig]:
        """
        Get the config with its shifts loaded, or None if never created.

        Args:
            reload: Overwrite any state already held by the session
        """
        query = (
            select(ScheduleConfig)
            .options(selectinload(ScheduleConfig.shifts))
            .where(ScheduleConfig.singleton_key == SCHEDULE_CONFIG_SINGLETON)
        )
        if reload:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
