"""
Schedule API endpoints: generation, reads, overrides and toggles.
"""

from datetime import date
from fastapi import APIRouter, Depends, Query, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schedule_engine.db.session import get_db
from schedule_engine.controllers.schedule_controller import ScheduleController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.rate_limit import GENERATION_RATE_LIMIT, limiter
from schedule_engine.deps.integrations import get_event_publisher, get_room_directory
from schedule_engine.schemas.schedule import (
    AddMissingShiftsRequest,
    AddMissingShiftsResult,
    BatchOverrideReport,
    BatchOverrideRequest,
    GenerateMonthRequest,
    GenerateQuarterRequest,
    MonthGenerationResult,
    OverrideRequest,
    OverrideResult,
    QuarterStatusResponse,
    RoomGenerationReport,
    ScheduleListResponse,
    ScheduleResponse,
    ToggleRequest,
    ToggleResult,
)
from schedule_engine.schemas.slot import SlotListResponse

router = APIRouter()


def get_schedule_controller(
    db: AsyncSession = Depends(get_db),
    room_directory: RoomDirectory = Depends(get_room_directory),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> ScheduleController:
    return ScheduleController(db, room_directory, event_publisher)


@router.post("/generate/month", response_model=MonthGenerationResult)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_month(
    request: Request,
    generate_data: GenerateMonthRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> MonthGenerationResult:
    """Generate one room or sub-room schedule for one month."""
    return await controller.generate_month(generate_data)


@router.post("/generate/quarter", response_model=RoomGenerationReport)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_quarter(
    request: Request,
    generate_data: GenerateQuarterRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> RoomGenerationReport:
    """Generate every scope of a room for one quarter."""
    return await controller.generate_quarter(generate_data)


@router.post("/add-missing-shifts", response_model=AddMissingShiftsResult)
async def add_missing_shifts(
    missing_data: AddMissingShiftsRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> AddMissingShiftsResult:
    """Generate shifts an existing schedule has not generated yet."""
    return await controller.add_missing_shifts(missing_data)


@router.post("/overrides/batch", response_model=BatchOverrideReport)
async def batch_override(
    override_data: BatchOverrideRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> BatchOverrideReport:
    """Override the same holiday on several schedules."""
    return await controller.batch_override(override_data)


@router.get("/rooms/{room_id}/quarter-status", response_model=QuarterStatusResponse)
async def get_quarter_status(
    room_id: str,
    quarter: int = Query(..., ge=1, le=4),
    year: int = Query(..., ge=2000, le=2100),
    controller: ScheduleController = Depends(get_schedule_controller),
) -> QuarterStatusResponse:
    """Completion status of a room's quarter."""
    return await controller.quarter_status(room_id, quarter, year)


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(
    room_id: str = Query(None),
    sub_room_id: str = Query(None),
    month: int = Query(None, ge=1, le=12),
    year: int = Query(None, ge=2000, le=2100),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    controller: ScheduleController = Depends(get_schedule_controller),
) -> ScheduleListResponse:
    """List schedules with optional filters."""
    return await controller.list_schedules(
        room_id=room_id,
        sub_room_id=sub_room_id,
        month=month,
        year=year,
        skip=skip,
        limit=limit,
    )


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: UUID,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> ScheduleResponse:
    """Get schedule by ID."""
    schedule = await controller.get_schedule(schedule_id)
    if not schedule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )
    return schedule


@router.get("/{schedule_id}/slots", response_model=SlotListResponse)
async def list_schedule_slots(
    schedule_id: UUID,
    day: date = Query(None, alias="date"),
    shift_name: str = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(1000, ge=1, le=5000),
    controller: ScheduleController = Depends(get_schedule_controller),
) -> SlotListResponse:
    """List a schedule's slots in time order."""
    slots = await controller.list_slots(schedule_id, day=day, shift_name=shift_name, skip=skip, limit=limit)
    if slots is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )
    return slots


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: UUID,
    controller: ScheduleController = Depends(get_schedule_controller),
):
    """Delete a schedule and its slots."""
    deleted = await controller.delete_schedule(schedule_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )


@router.post("/{schedule_id}/overrides", response_model=OverrideResult)
async def create_override(
    schedule_id: UUID,
    override_data: OverrideRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> OverrideResult:
    """Open shifts on one of the schedule's holidays."""
    return await controller.create_override(schedule_id, override_data)


@router.patch("/{schedule_id}/toggle", response_model=ToggleResult)
async def toggle_schedule(
    schedule_id: UUID,
    toggle_data: ToggleRequest,
    controller: ScheduleController = Depends(get_schedule_controller),
) -> ToggleResult:
    """Enable or disable a schedule, some of its shifts, or its sub-room."""
    return await controller.toggle(schedule_id, toggle_data)
