"""
Database models.
Import all models here to ensure they're registered with Base.
"""

from schedule_engine.models.schedule import Schedule, Slot, SlotStatus
from schedule_engine.models.schedule_config import (
    ScheduleConfig,
    ShiftDefinition,
    HolidayRule,
    SHIFT_NAMES,
)
from schedule_engine.models.auto_schedule_config import AutoScheduleConfig

__all__ = [
    "Schedule",
    "Slot",
    "SlotStatus",
    "ScheduleConfig",
    "ShiftDefinition",
    "HolidayRule",
    "SHIFT_NAMES",
    "AutoScheduleConfig",
]
