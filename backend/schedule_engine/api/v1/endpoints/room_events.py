"""
Inbound room event endpoints. Always answer 200; the result says whether
generation happened.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.session import get_db
from schedule_engine.controllers.room_event_controller import RoomEventController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.deps.integrations import get_event_publisher, get_room_directory
from schedule_engine.schemas.room_events import RoomCreatedEvent, RoomEventResult, SubRoomAddedEvent

router = APIRouter()


@router.post("/room-created", response_model=RoomEventResult)
async def room_created(
    event: RoomCreatedEvent,
    db: AsyncSession = Depends(get_db),
    room_directory: RoomDirectory = Depends(get_room_directory),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> RoomEventResult:
    """Generate the next schedulable quarter for a new room."""
    controller = RoomEventController(db, room_directory, event_publisher)
    return await controller.room_created(event)


@router.post("/sub-room-added", response_model=RoomEventResult)
async def sub_room_added(
    event: SubRoomAddedEvent,
    db: AsyncSession = Depends(get_db),
    room_directory: RoomDirectory = Depends(get_room_directory),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> RoomEventResult:
    """Generate open months for sub-rooms added to an existing room."""
    controller = RoomEventController(db, room_directory, event_publisher)
    return await controller.sub_room_added(event)
