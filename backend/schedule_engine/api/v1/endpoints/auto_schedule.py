"""
Auto-generation API endpoints.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.session import get_db
from schedule_engine.controllers.auto_schedule_controller import AutoScheduleController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.rate_limit import GENERATION_RATE_LIMIT, limiter
from schedule_engine.deps.integrations import get_event_publisher, get_room_directory
from schedule_engine.schemas.auto_schedule import (
    AutoGenerationReport,
    AutoPreviewResponse,
    AutoRunRequest,
    AutoScheduleConfigResponse,
    AutoScheduleConfigUpdate,
)

router = APIRouter()


def get_auto_schedule_controller(
    db: AsyncSession = Depends(get_db),
    room_directory: RoomDirectory = Depends(get_room_directory),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> AutoScheduleController:
    return AutoScheduleController(db, room_directory, event_publisher)


@router.get("/config", response_model=AutoScheduleConfigResponse)
async def get_auto_schedule_config(
    controller: AutoScheduleController = Depends(get_auto_schedule_controller),
) -> AutoScheduleConfigResponse:
    """Get the auto-generation switch and run statistics."""
    return await controller.get_config()


@router.put("/config", response_model=AutoScheduleConfigResponse)
async def update_auto_schedule_config(
    config_data: AutoScheduleConfigUpdate,
    controller: AutoScheduleController = Depends(get_auto_schedule_controller),
) -> AutoScheduleConfigResponse:
    """Enable or disable auto-generation."""
    return await controller.update_config(config_data)


@router.post("/run", response_model=AutoGenerationReport)
@limiter.limit(GENERATION_RATE_LIMIT)
async def run_auto_schedule(
    request: Request,
    run_data: AutoRunRequest,
    controller: AutoScheduleController = Depends(get_auto_schedule_controller),
) -> AutoGenerationReport:
    """Run auto-generation now; `force` skips the end-of-month check."""
    return await controller.run(run_data)


@router.get("/preview", response_model=AutoPreviewResponse)
async def preview_auto_schedule(
    controller: AutoScheduleController = Depends(get_auto_schedule_controller),
) -> AutoPreviewResponse:
    """What an auto-generation run would target right now."""
    return await controller.preview()
