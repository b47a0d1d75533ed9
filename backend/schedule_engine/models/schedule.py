"""
Schedule and Slot models.

A Schedule is the generation record for one room (or sub-room) for one calendar
month. It owns a snapshot of the shift configuration and of the holiday
calendar taken at generation time, and owns its Slots.
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Index,
    UniqueConstraint,
    Enum as SQLEnum,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
import enum

from schedule_engine.db.base import Base


class SlotStatus(str, enum.Enum):
    """Slot booking status enumeration."""
    AVAILABLE = "available"
    BOOKED = "booked"
    LOCKED = "locked"
    RESERVED = "reserved"


class Schedule(Base):
    """Schedule model - one per (room, sub-room, month, year)."""

    __tablename__ = "schedules"
    __table_args__ = (
        UniqueConstraint("room_id", "sub_room_id", "month", "year", name="uq_schedule_room_subroom_month"),
        # NULLs are distinct in the constraint above
        Index(
            "uq_schedule_room_month_without_sub_room",
            "room_id",
            "month",
            "year",
            unique=True,
            postgresql_where=text("sub_room_id IS NULL"),
            sqlite_where=text("sub_room_id IS NULL"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    room_id = Column(String(64), nullable=False, index=True)
    sub_room_id = Column(String(64), nullable=True, index=True)  # NULL = room without sub-rooms
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    # {shift_name: {label, start_time, end_time, slot_duration, is_active, is_generated}}
    shift_config = Column(JSON, nullable=False, default=dict)
    # See schedule_engine.utils.holidays for the document shape
    holiday_snapshot = Column(JSON, nullable=False, default=dict)

    is_active_sub_room = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    slots = relationship("Slot", back_populates="schedule", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def has_sub_room(self) -> bool:
        return self.sub_room_id is not None


class Slot(Base):
    """Smallest bookable unit of time within a shift."""

    __tablename__ = "slots"
    __table_args__ = (
        Index("ix_slots_schedule_date_shift", "schedule_id", "date", "shift_name"),
        Index("ix_slots_dentist_time", "dentist_id", "start_time", "end_time"),
        Index("ix_slots_nurse_time", "nurse_id", "start_time", "end_time"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    schedule_id = Column(UUID(as_uuid=True), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(String(64), nullable=False, index=True)
    sub_room_id = Column(String(64), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)  # civil date
    start_time = Column(DateTime, nullable=False)  # naive UTC
    end_time = Column(DateTime, nullable=False)  # naive UTC
    duration_minutes = Column(Integer, nullable=False)
    shift_name = Column(String(32), nullable=False)
    status = Column(SQLEnum(SlotStatus), nullable=False, default=SlotStatus.AVAILABLE, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    dentist_id = Column(String(64), nullable=True)
    nurse_id = Column(String(64), nullable=True)
    appointment_id = Column(String(64), nullable=True)
    is_holiday_override = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    schedule = relationship("Schedule", back_populates="slots")
