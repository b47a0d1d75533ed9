"""
Schedule config controller.
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.services.schedule_config_service import ScheduleConfigService
from schedule_engine.schemas.schedule_config import (
    HolidayRuleCreate,
    HolidayRuleListResponse,
    HolidayRuleResponse,
    ScheduleConfigResponse,
    ScheduleConfigUpdate,
)


class ScheduleConfigController(BaseController):
    """Controller for the global config and holiday rules."""

    def __init__(self, session: AsyncSession):
        self.config_service = ScheduleConfigService(session)

    async def get_config(self) -> ScheduleConfigResponse:
        return await self.config_service.get_config()

    async def update_config(self, config_data: ScheduleConfigUpdate) -> ScheduleConfigResponse:
        return await self.config_service.update_config(config_data)

    async def list_holidays(self, is_recurring: Optional[bool] = None) -> HolidayRuleListResponse:
        return await self.config_service.list_holidays(is_recurring=is_recurring)

    async def create_holiday(self, holiday_data: HolidayRuleCreate) -> HolidayRuleResponse:
        return await self.config_service.create_holiday(holiday_data)

    async def delete_holiday(self, holiday_id: UUID) -> bool:
        return await self.config_service.delete_holiday(holiday_id)
