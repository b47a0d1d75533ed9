"""
Room event controller.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.services.room_event_service import RoomEventService
from schedule_engine.schemas.room_events import RoomCreatedEvent, RoomEventResult, SubRoomAddedEvent


class RoomEventController(BaseController):
    """Controller for inbound room events."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.room_event_service = RoomEventService(session, room_directory, event_publisher)

    async def room_created(self, event: RoomCreatedEvent) -> RoomEventResult:
        return await self.room_event_service.handle_room_created(event)

    async def sub_room_added(self, event: SubRoomAddedEvent) -> RoomEventResult:
        return await self.room_event_service.handle_sub_room_added(event)
