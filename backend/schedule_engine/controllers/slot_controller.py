"""
Slot controller.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.services.conflict_service import ConflictService
from schedule_engine.schemas.slot import (
    AssignStaffRequest,
    AssignStaffResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
)


class SlotController(BaseController):
    """Controller for staff conflicts and assignment."""

    def __init__(self, session: AsyncSession):
        self.conflict_service = ConflictService(session)

    async def find_conflicts(self, request: ConflictCheckRequest) -> ConflictCheckResponse:
        return await self.conflict_service.find_conflicts(request.staff_id, request.slot_ids)

    async def assign_staff(self, request: AssignStaffRequest) -> AssignStaffResponse:
        return await self.conflict_service.assign_staff(
            request.slot_ids,
            dentist_id=request.dentist_id,
            nurse_id=request.nurse_id,
        )
