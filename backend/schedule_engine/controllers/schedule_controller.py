"""
Schedule controller.
"""

from datetime import date
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.services.override_service import OverrideService
from schedule_engine.services.schedule_generation_service import ScheduleGenerationService
from schedule_engine.services.schedule_service import ScheduleService
from schedule_engine.services.toggle_service import ToggleService
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


class ScheduleController(BaseController):
    """Controller for schedule generation, overrides and toggles."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.schedule_service = ScheduleService(session)
        self.generation_service = ScheduleGenerationService(session, room_directory, event_publisher)
        self.override_service = OverrideService(session)
        self.toggle_service = ToggleService(session)

    async def generate_month(self, request: GenerateMonthRequest) -> MonthGenerationResult:
        return await self.generation_service.generate_for_room_month(
            request.room_id,
            request.sub_room_id,
            request.month,
            request.year,
            shift_names=request.shift_names,
            slot_duration=request.slot_duration,
        )

    async def generate_quarter(self, request: GenerateQuarterRequest) -> RoomGenerationReport:
        return await self.generation_service.generate_for_room_quarter(
            request.room_id,
            request.quarter,
            request.year,
            shift_names=request.shift_names,
            slot_duration=request.slot_duration,
        )

    async def add_missing_shifts(self, request: AddMissingShiftsRequest) -> AddMissingShiftsResult:
        return await self.generation_service.add_missing_shifts(
            request.room_id,
            request.sub_room_id,
            request.month,
            request.year,
            request.shift_names,
            partial_start_date=request.partial_start_date,
        )

    async def quarter_status(self, room_id: str, quarter: int, year: int) -> QuarterStatusResponse:
        return await self.generation_service.quarter_status(room_id, quarter, year)

    async def get_schedule(self, schedule_id: UUID) -> Optional[ScheduleResponse]:
        return await self.schedule_service.get_schedule(schedule_id)

    async def list_schedules(
        self,
        room_id: Optional[str] = None,
        sub_room_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> ScheduleListResponse:
        schedules, total = await self.schedule_service.list_schedules(
            room_id=room_id,
            sub_room_id=sub_room_id,
            month=month,
            year=year,
            skip=skip,
            limit=limit,
        )
        return ScheduleListResponse(items=schedules, total=total)

    async def list_slots(
        self,
        schedule_id: UUID,
        day: Optional[date] = None,
        shift_name: Optional[str] = None,
        skip: int = 0,
        limit: int = 1000,
    ) -> Optional[SlotListResponse]:
        result = await self.schedule_service.list_slots(
            schedule_id, day=day, shift_name=shift_name, skip=skip, limit=limit
        )
        if result is None:
            return None
        slots, total = result
        return SlotListResponse(items=slots, total=total)

    async def delete_schedule(self, schedule_id: UUID) -> bool:
        return await self.schedule_service.delete_schedule(schedule_id)

    async def create_override(self, schedule_id: UUID, request: OverrideRequest) -> OverrideResult:
        return await self.override_service.create_override(
            schedule_id, request.date, request.shift_names, note=request.note
        )

    async def batch_override(self, request: BatchOverrideRequest) -> BatchOverrideReport:
        return await self.override_service.batch_override(
            request.schedule_ids, request.date, request.shift_names, note=request.note
        )

    async def toggle(self, schedule_id: UUID, request: ToggleRequest) -> ToggleResult:
        return await self.toggle_service.toggle(schedule_id, request)
