"""
Auto-schedule config repository for database operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.repositories.base_repository import BaseRepository
from schedule_engine.models.auto_schedule_config import AutoScheduleConfig, AUTO_SCHEDULE_CONFIG_ID


class AutoScheduleConfigRepository(BaseRepository[AutoScheduleConfig]):
    """Repository for the auto-schedule config singleton."""

    def __init__(self, session: AsyncSession):
        super().__init__(AutoScheduleConfig, session)

    async def get_or_create(self) -> AutoScheduleConfig:
        """Get the singleton, creating it enabled on first access."""
        config = await self.get(AUTO_SCHEDULE_CONFIG_ID)
        if config:
            return config
        return await self.create(
            id=AUTO_SCHEDULE_CONFIG_ID,
            enabled=True,
            total_auto_runs=0,
        )
