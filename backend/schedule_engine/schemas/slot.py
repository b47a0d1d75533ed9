"""
Slot Pydantic schemas for request/response validation.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from uuid import UUID

from schedule_engine.models.schedule import SlotStatus


class SlotResponse(BaseModel):
    """Schema for slot response. Instants are UTC."""
    id: UUID
    schedule_id: UUID
    room_id: str
    sub_room_id: Optional[str] = None
    date: date
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    shift_name: str
    status: SlotStatus
    is_active: bool
    dentist_id: Optional[str] = None
    nurse_id: Optional[str] = None
    appointment_id: Optional[str] = None
    is_holiday_override: bool

    class Config:
        from_attributes = True


class SlotListResponse(BaseModel):
    """Schema for slot list response."""
    items: List[SlotResponse]
    total: int


class ConflictCheckRequest(BaseModel):
    """Check whether a staff member is already booked over some slots."""
    staff_id: str = Field(..., min_length=1, max_length=64)
    slot_ids: List[UUID] = Field(..., min_length=1)


class ConflictingAssignment(BaseModel):
    """An existing assignment that overlaps a candidate slot."""
    candidate_slot_id: UUID
    slot_id: UUID
    schedule_id: UUID
    room_id: str
    sub_room_id: Optional[str] = None
    date: date
    start_time: datetime
    end_time: datetime
    shift_name: str
    role: str  # dentist / nurse


class ConflictCheckResponse(BaseModel):
    staff_id: str
    has_conflicts: bool
    conflicts: List[ConflictingAssignment]


class AssignStaffRequest(BaseModel):
    """Assign a dentist and/or a nurse to several slots."""
    slot_ids: List[UUID] = Field(..., min_length=1)
    dentist_id: Optional[str] = Field(None, max_length=64)
    nurse_id: Optional[str] = Field(None, max_length=64)

    @model_validator(mode="after")
    def validate_has_staff(self) -> "AssignStaffRequest":
        if not self.dentist_id and not self.nurse_id:
            raise ValueError("dentist_id or nurse_id is required")
        return self


class AssignStaffResponse(BaseModel):
    updated: int
    slot_ids: List[UUID]
    dentist_id: Optional[str] = None
    nurse_id: Optional[str] = None
