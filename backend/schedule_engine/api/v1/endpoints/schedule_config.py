"""
Schedule config and holiday rule API endpoints.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schedule_engine.db.session import get_db
from schedule_engine.controllers.schedule_config_controller import ScheduleConfigController
from schedule_engine.schemas.schedule_config import (
    HolidayRuleCreate,
    HolidayRuleListResponse,
    HolidayRuleResponse,
    ScheduleConfigResponse,
    ScheduleConfigUpdate,
)

router = APIRouter()


@router.get("/schedule-config", response_model=ScheduleConfigResponse)
async def get_schedule_config(
    db: AsyncSession = Depends(get_db),
) -> ScheduleConfigResponse:
    """Get the global shift config."""
    controller = ScheduleConfigController(db)
    return await controller.get_config()


@router.put("/schedule-config", response_model=ScheduleConfigResponse)
async def update_schedule_config(
    config_data: ScheduleConfigUpdate,
    db: AsyncSession = Depends(get_db),
) -> ScheduleConfigResponse:
    """Create or update the global shift config."""
    controller = ScheduleConfigController(db)
    return await controller.update_config(config_data)


@router.get("/holidays", response_model=HolidayRuleListResponse)
async def list_holidays(
    is_recurring: bool = Query(None),
    db: AsyncSession = Depends(get_db),
) -> HolidayRuleListResponse:
    """List holiday rules."""
    controller = ScheduleConfigController(db)
    return await controller.list_holidays(is_recurring=is_recurring)


@router.post("/holidays", response_model=HolidayRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    holiday_data: HolidayRuleCreate,
    db: AsyncSession = Depends(get_db),
) -> HolidayRuleResponse:
    """Create a holiday rule."""
    controller = ScheduleConfigController(db)
    return await controller.create_holiday(holiday_data)


@router.delete("/holidays/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a holiday rule that no schedule has used."""
    controller = ScheduleConfigController(db)
    deleted = await controller.delete_holiday(holiday_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Holiday not found",
        )
