"""
Auto-generation controller.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.services.auto_schedule_service import AutoScheduleService
from schedule_engine.schemas.auto_schedule import (
    AutoGenerationReport,
    AutoPreviewResponse,
    AutoRunRequest,
    AutoScheduleConfigResponse,
    AutoScheduleConfigUpdate,
)


class AutoScheduleController(BaseController):
    """Controller for auto-generation."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.auto_schedule_service = AutoScheduleService(session, room_directory, event_publisher)

    async def get_config(self) -> AutoScheduleConfigResponse:
        return await self.auto_schedule_service.get_config()

    async def update_config(self, config_data: AutoScheduleConfigUpdate) -> AutoScheduleConfigResponse:
        return await self.auto_schedule_service.update_config(config_data)

    async def run(self, request: AutoRunRequest) -> AutoGenerationReport:
        return await self.auto_schedule_service.run(force=request.force)

    async def preview(self) -> AutoPreviewResponse:
        return await self.auto_schedule_service.preview()
