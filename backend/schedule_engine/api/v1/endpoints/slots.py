"""
Slot API endpoints: staff conflicts and assignment.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db.session import get_db
from schedule_engine.controllers.slot_controller import SlotController
from schedule_engine.schemas.slot import (
    AssignStaffRequest,
    AssignStaffResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
)

router = APIRouter()


@router.post("/conflicts", response_model=ConflictCheckResponse)
async def find_conflicts(
    conflict_data: ConflictCheckRequest,
    db: AsyncSession = Depends(get_db),
) -> ConflictCheckResponse:
    """Existing assignments of a staff member that overlap the given slots."""
    controller = SlotController(db)
    return await controller.find_conflicts(conflict_data)


@router.patch("/staff", response_model=AssignStaffResponse)
async def assign_staff(
    assign_data: AssignStaffRequest,
    db: AsyncSession = Depends(get_db),
) -> AssignStaffResponse:
    """Assign a dentist and/or nurse to slots; 409 on overlapping assignments."""
    controller = SlotController(db)
    return await controller.assign_staff(assign_data)
