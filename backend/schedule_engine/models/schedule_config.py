"""
Global scheduling configuration: the three named shifts, the slot unit
duration, and the holiday rules.
"""

from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from schedule_engine.db.base import Base

SCHEDULE_CONFIG_SINGLETON = "SCHEDULE_CONFIG_SINGLETON"

# Shift keys in display order
SHIFT_NAMES = ("morning", "afternoon", "evening")


class ScheduleConfig(Base):
    """Singleton holding the global shift windows and unit duration."""

    __tablename__ = "schedule_configs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    singleton_key = Column(String(64), nullable=False, unique=True, default=SCHEDULE_CONFIG_SINGLETON)
    unit_duration = Column(Integer, nullable=False, default=15)  # minutes
    max_booking_days = Column(Integer, nullable=False, default=30)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    shifts = relationship(
        "ShiftDefinition",
        back_populates="config",
        cascade="all, delete-orphan",
        order_by="ShiftDefinition.position",
    )


class ShiftDefinition(Base):
    """A named civil time-of-day window (HH:mm, same day)."""

    __tablename__ = "shift_definitions"
    __table_args__ = (
        UniqueConstraint("config_id", "name", name="uq_shift_definition_config_name"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    config_id = Column(UUID(as_uuid=True), ForeignKey("schedule_configs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(32), nullable=False)  # morning / afternoon / evening
    label = Column(String(100), nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:mm
    end_time = Column(String(5), nullable=False)  # HH:mm
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    config = relationship("ScheduleConfig", back_populates="shifts")


class HolidayRule(Base):
    """Recurring weekday closure or closed date range."""

    __tablename__ = "holiday_rules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    day_of_week = Column(Integer, nullable=True)  # 1=Sun, 2=Mon, ..., 7=Sat
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    note = Column(String(1000), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # Set once a ranged rule has been captured in a schedule's holiday snapshot
    has_been_used = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
