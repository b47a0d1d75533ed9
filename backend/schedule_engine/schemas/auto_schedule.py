"""
Auto-generation Pydantic schemas.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from schedule_engine.schemas.schedule import QuarterSchema, QuarterStatusResponse, RoomGenerationReport


class AutoScheduleConfigResponse(BaseModel):
    """Schema for the auto-generation config and run statistics."""
    id: str
    enabled: bool
    last_modified_by: Optional[str] = None
    last_auto_run: Optional[datetime] = None
    total_auto_runs: int = 0
    last_successful_run: Optional[datetime] = None
    last_failed_run: Optional[datetime] = None

    class Config:
        from_attributes = True


class AutoScheduleConfigUpdate(BaseModel):
    enabled: bool
    modified_by: Optional[str] = Field(None, max_length=255)


class AutoRunRequest(BaseModel):
    """Manual run; `force` ignores the end-of-month gate."""
    force: bool = False


class RoomRunOutcome(BaseModel):
    """Outcome for one room of an auto-generation run."""
    room_id: str
    status: str  # succeeded / skipped / failed
    reason: Optional[str] = None
    reports: List[RoomGenerationReport] = []


class AutoGenerationReport(BaseModel):
    """Result of an auto-generation run."""
    ran: bool
    reason: Optional[str] = None
    run_at: datetime
    current_quarter: Optional[QuarterSchema] = None
    next_quarter: Optional[QuarterSchema] = None
    rooms_total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    rooms: List[RoomRunOutcome] = []


class RoomPreview(BaseModel):
    room_id: str
    name: Optional[str] = None
    quarters: List[QuarterStatusResponse] = []


class AutoPreviewResponse(BaseModel):
    """What an auto-generation run would do right now."""
    enabled: bool
    should_run: bool
    now: datetime
    current_quarter: Optional[QuarterSchema] = None
    next_quarter: Optional[QuarterSchema] = None
    rooms: List[RoomPreview] = []
