"""
arq worker: daily auto-generation check and inbound room events.

Run with: arq schedule_engine.workers.auto_schedule_worker.WorkerSettings
"""

from typing import Any, Dict, Optional

from arq.connections import RedisSettings
from arq.cron import cron

from schedule_engine.core.config import settings
from schedule_engine.core.integrations.events import RedisEventPublisher
from schedule_engine.core.integrations.room_directory import RedisRoomDirectory
from schedule_engine.core.logging import get_logger, setup_logging
from schedule_engine.db.session import close_db, get_sessionmaker
from schedule_engine.schemas.room_events import RoomCreatedEvent, SubRoomAddedEvent
from schedule_engine.services.auto_schedule_service import AutoScheduleService
from schedule_engine.services.room_event_service import RoomEventService
from schedule_engine.utils.civil_time import civil_tz

logger = get_logger(__name__)


async def startup(ctx: Dict[str, Any]) -> None:
    setup_logging()
    ctx["session_factory"] = get_sessionmaker()
    ctx["room_directory"] = RedisRoomDirectory()
    ctx["event_publisher"] = RedisEventPublisher()
    logger.info("Schedule worker started", extra={"civil_timezone": settings.CIVIL_TIMEZONE})


async def shutdown(ctx: Dict[str, Any]) -> None:
    await ctx["room_directory"].close()
    await ctx["event_publisher"].close()
    await close_db()


async def auto_schedule_task(ctx: Dict[str, Any], force: bool = False) -> Dict[str, Any]:
    """
    Daily check; the policy only generates on the civil last day of a month.

    Returns:
        The run report as a dict
    """
    async with ctx["session_factory"]() as session:
        service = AutoScheduleService(session, ctx["room_directory"], ctx["event_publisher"])
        report = await service.run(force=force)
    return report.model_dump(mode="json")


async def room_created_task(ctx: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Best-effort generation for a new room. Never raises."""
    event = RoomCreatedEvent.model_validate(payload)
    async with ctx["session_factory"]() as session:
        service = RoomEventService(session, ctx["room_directory"], ctx["event_publisher"])
        result = await service.handle_room_created(event)
    return result.model_dump(mode="json")


async def sub_room_added_task(ctx: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Best-effort generation for sub-rooms added to a room. Never raises."""
    event = SubRoomAddedEvent.model_validate(payload)
    async with ctx["session_factory"]() as session:
        service = RoomEventService(session, ctx["room_directory"], ctx["event_publisher"])
        result = await service.handle_sub_room_added(event)
    return result.model_dump(mode="json")


class WorkerSettings:
    """arq worker settings."""

    functions = [
        auto_schedule_task,
        room_created_task,
        sub_room_added_task,
    ]
    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    on_startup = startup
    on_shutdown = shutdown

    # Cron times are civil time
    timezone = civil_tz()
    cron_jobs = [
        cron(
            auto_schedule_task,
            hour=settings.AUTO_SCHEDULE_HOUR,
            minute=settings.AUTO_SCHEDULE_MINUTE,
            run_at_startup=False,
            unique=True,
        ),
    ]

    # Generation for a room fans out into many inserts
    job_timeout = 600
    max_tries = 1
