"""
Schedule config and holiday rule Pydantic schemas.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from uuid import UUID

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ShiftDefinitionBase(BaseModel):
    """Base shift definition schema."""
    name: str = Field(..., pattern=r"^(morning|afternoon|evening)$")
    label: str = Field(..., min_length=1, max_length=100)
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    is_active: bool = True

    @model_validator(mode="after")
    def validate_window(self) -> "ShiftDefinitionBase":
        if self.end_time <= self.start_time:
            raise ValueError(f"Shift '{self.name}' must end after it starts")
        return self


class ShiftDefinitionResponse(ShiftDefinitionBase):
    class Config:
        from_attributes = True


class ScheduleConfigResponse(BaseModel):
    """Schema for the global schedule config."""
    id: UUID
    unit_duration: int
    max_booking_days: int
    shifts: List[ShiftDefinitionResponse]
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScheduleConfigUpdate(BaseModel):
    """Schema for updating the global schedule config (all fields optional)."""
    unit_duration: Optional[int] = Field(None, ge=5, le=180)
    max_booking_days: Optional[int] = Field(None, ge=1, le=365)
    shifts: Optional[List[ShiftDefinitionBase]] = None

    @model_validator(mode="after")
    def validate_unique_shifts(self) -> "ScheduleConfigUpdate":
        if self.shifts is not None:
            names = [shift.name for shift in self.shifts]
            if len(names) != len(set(names)):
                raise ValueError("Shift names must be unique")
        return self


class HolidayRuleBase(BaseModel):
    """Base holiday rule schema."""
    name: str = Field(..., min_length=1, max_length=255)
    is_recurring: bool = False
    day_of_week: Optional[int] = Field(None, ge=1, le=7)  # 1=Sun ... 7=Sat
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    note: Optional[str] = Field(None, max_length=1000)
    is_active: bool = True


class HolidayRuleCreate(HolidayRuleBase):
    """Schema for creating a holiday rule."""

    @model_validator(mode="after")
    def validate_kind(self) -> "HolidayRuleCreate":
        if self.is_recurring:
            if self.day_of_week is None:
                raise ValueError("day_of_week is required for a recurring holiday")
            self.start_date = None
            self.end_date = None
        else:
            if self.start_date is None or self.end_date is None:
                raise ValueError("start_date and end_date are required for a ranged holiday")
            if self.end_date < self.start_date:
                raise ValueError("end_date must be on or after start_date")
            self.day_of_week = None
        return self


class HolidayRuleResponse(HolidayRuleBase):
    """Schema for holiday rule response."""
    id: UUID
    has_been_used: bool

    class Config:
        from_attributes = True


class HolidayRuleListResponse(BaseModel):
    items: List[HolidayRuleResponse]
    total: int
