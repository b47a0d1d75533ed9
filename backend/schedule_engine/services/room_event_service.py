"""
Inbound room events.

Generation triggered by a room or sub-room being created is best effort: any
failure is logged and reported, never raised back to the room service.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import AppException
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.schedule_repository import ScheduleRepository
from schedule_engine.schemas.room_events import RoomCreatedEvent, RoomEventResult, SubRoomAddedEvent
from schedule_engine.services.base_service import BaseService
from schedule_engine.services.schedule_generation_service import ScheduleGenerationService
from schedule_engine.utils.civil_time import civil_date, civil_now
from schedule_engine.utils.quarters import next_schedulable_quarter

logger = get_logger(__name__)


class RoomEventService(BaseService):
    """Service reacting to room lifecycle events."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.session = session
        self.schedule_repo = ScheduleRepository(session)
        self.generation_service = ScheduleGenerationService(session, room_directory, event_publisher)

    async def handle_room_created(self, event: RoomCreatedEvent, now: Optional[datetime] = None) -> RoomEventResult:
        """Generate the next schedulable quarter for a new room."""
        now = now or civil_now()
        target = next_schedulable_quarter(now)
        logger.info(
            f"Room created: {event.room_id}",
            extra={"room_id": event.room_id, "sub_rooms": len(event.sub_room_ids), "quarter": target.as_dict()},
        )
        try:
            report = await self.generation_service.generate_for_room_quarter(
                event.room_id, target.quarter, target.year, now=now
            )
        except (AppException, SQLAlchemyError) as exc:
            await self.session.rollback()
            logger.warning(
                f"Generation for new room {event.room_id} failed",
                extra={"room_id": event.room_id, "error": str(exc)},
            )
            return RoomEventResult(room_id=event.room_id, handled=False, reason=self.reason_of(exc))

        return RoomEventResult(room_id=event.room_id, handled=True, reports=[report])

    async def handle_sub_room_added(self, event: SubRoomAddedEvent, now: Optional[datetime] = None) -> RoomEventResult:
        """
        Generate the new sub-rooms for every month the room already has
        schedules for and that has not ended yet.
        """
        now = now or civil_now()
        tomorrow = civil_date(now) + timedelta(days=1)
        try:
            months = await self.schedule_repo.list_months_for_room(event.room_id, tomorrow)
            if not months:
                logger.info(
                    f"Sub-rooms added to {event.room_id} with no open schedules",
                    extra={"room_id": event.room_id},
                )
                return RoomEventResult(room_id=event.room_id, handled=True, reason="no_open_schedules")

            report = await self.generation_service.generate_for_sub_rooms(
                event.room_id, event.sub_room_ids, months, now=now
            )
        except (AppException, SQLAlchemyError) as exc:
            await self.session.rollback()
            logger.warning(
                f"Generation for sub-rooms of {event.room_id} failed",
                extra={"room_id": event.room_id, "sub_room_ids": event.sub_room_ids, "error": str(exc)},
            )
            return RoomEventResult(room_id=event.room_id, handled=False, reason=self.reason_of(exc))

        return RoomEventResult(room_id=event.room_id, handled=True, reports=[report])
