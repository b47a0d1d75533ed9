"""
Schedule Pydantic schemas for request/response validation.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from uuid import UUID


class QuarterSchema(BaseModel):
    """A calendar quarter."""
    quarter: int = Field(..., ge=1, le=4)
    year: int = Field(..., ge=2000, le=2100)


class ShiftSnapshot(BaseModel):
    """Shift window captured on a schedule at generation time."""
    label: Optional[str] = None
    start_time: str
    end_time: str
    slot_duration: int
    is_active: bool = True
    is_generated: bool = False


class ScheduleResponse(BaseModel):
    """Schema for schedule response."""
    id: UUID
    room_id: str
    sub_room_id: Optional[str] = None
    month: int
    year: int
    start_date: date
    end_date: date
    shift_config: Dict[str, ShiftSnapshot]
    holiday_snapshot: Dict[str, Any]
    is_active_sub_room: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScheduleListResponse(BaseModel):
    """Schema for schedule list response."""
    items: List[ScheduleResponse]
    total: int


class GenerateMonthRequest(BaseModel):
    """Generate one room (or sub-room) schedule for one month."""
    room_id: str = Field(..., min_length=1, max_length=64)
    sub_room_id: Optional[str] = Field(None, max_length=64)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    shift_names: Optional[List[str]] = None
    slot_duration: Optional[int] = Field(None, ge=1, le=720)


class GenerateQuarterRequest(BaseModel):
    """Generate every scope of a room for one quarter."""
    room_id: str = Field(..., min_length=1, max_length=64)
    quarter: int = Field(..., ge=1, le=4)
    year: int = Field(..., ge=2000, le=2100)
    shift_names: Optional[List[str]] = None
    slot_duration: Optional[int] = Field(None, ge=1, le=720)


class AddMissingShiftsRequest(BaseModel):
    """Generate shifts that an existing schedule has not generated yet."""
    room_id: str = Field(..., min_length=1, max_length=64)
    sub_room_id: Optional[str] = Field(None, max_length=64)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    shift_names: List[str] = Field(..., min_length=1)
    partial_start_date: Optional[date] = None


class ShiftOutcome(BaseModel):
    """What happened to one shift in a generation or override call."""
    shift_name: str
    status: str  # generated / skipped / failed
    reason: Optional[str] = None
    slots_created: int = 0


class MonthGenerationResult(BaseModel):
    """Result of generating one (room, sub-room, month, year) key."""
    schedule_id: Optional[UUID] = None
    room_id: str
    sub_room_id: Optional[str] = None
    month: int
    year: int
    created: bool
    reason: Optional[str] = None
    slots_created: int = 0
    shifts: List[ShiftOutcome] = []


class AddMissingShiftsResult(BaseModel):
    """Result of filling in missing shifts on an existing schedule."""
    schedule_id: UUID
    slots_created: int = 0
    shifts: List[ShiftOutcome] = []


class RoomGenerationItem(BaseModel):
    """Outcome for one (scope, month) of a room generation batch."""
    sub_room_id: Optional[str] = None
    month: int
    year: int
    status: str  # succeeded / skipped / failed
    reason: Optional[str] = None
    schedule_id: Optional[UUID] = None
    slots_created: int = 0


class RoomGenerationReport(BaseModel):
    """Per-room generation report (a quarter, or the months a new sub-room joins)."""
    room_id: str
    quarter: Optional[int] = None
    year: Optional[int] = None
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    slots_created: int = 0
    items: List[RoomGenerationItem] = []


class MonthStatus(BaseModel):
    """Completion state of one month of a room's quarter."""
    month: int
    year: int
    scopes_total: int
    scopes_generated: int
    missing_sub_room_ids: List[Optional[str]] = []
    is_past: bool = False
    is_complete: bool = False


class QuarterStatusResponse(BaseModel):
    """Completion state of a room's quarter."""
    room_id: str
    quarter: int
    year: int
    months: List[MonthStatus]
    is_complete: bool


class OverrideRequest(BaseModel):
    """Open shifts on a date that the schedule's holiday snapshot marks as off."""
    date: date
    shift_names: List[str] = Field(..., min_length=1)
    note: Optional[str] = Field(None, max_length=1000)


class OverrideResult(BaseModel):
    """Result of overriding one schedule's holiday."""
    schedule_id: UUID
    date: date
    slots_created: int = 0
    shifts: List[ShiftOutcome] = []


class BatchOverrideRequest(OverrideRequest):
    """Override the same holiday on several schedules."""
    schedule_ids: List[UUID] = Field(..., min_length=1)


class BatchOverrideItem(BaseModel):
    """Outcome for one schedule of a batch override."""
    schedule_id: UUID
    status: str  # succeeded / skipped / failed
    reason: Optional[str] = None
    slots_created: int = 0
    shifts: List[ShiftOutcome] = []


class BatchOverrideReport(BaseModel):
    """Batch override report."""
    date: date
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    slots_created: int = 0
    items: List[BatchOverrideItem] = []


class DateRange(BaseModel):
    """Inclusive civil date range."""
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class ShiftToggle(BaseModel):
    shift_name: str
    is_active: bool


class SubRoomToggle(BaseModel):
    sub_room_id: str
    is_active: bool


class ToggleRequest(BaseModel):
    """
    Enable or disable a schedule, some of its shifts, or its sub-room.

    Shift and sub-room toggles only touch slots inside `date_range`, which is
    then required.
    """
    is_active: Optional[bool] = None
    shift_toggles: Optional[List[ShiftToggle]] = None
    sub_room_toggle: Optional[SubRoomToggle] = None
    date_range: Optional[DateRange] = None

    @model_validator(mode="after")
    def validate_has_change(self) -> "ToggleRequest":
        if self.is_active is None and not self.shift_toggles and self.sub_room_toggle is None:
            raise ValueError("Nothing to toggle")
        return self


class ToggleResult(BaseModel):
    """Result of a toggle."""
    schedule_id: UUID
    is_active: bool
    slots_updated: int
    shift_config: Dict[str, ShiftSnapshot]
