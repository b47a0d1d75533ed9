"""
Test doubles and builders shared by the test modules.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import DependencyUnavailableError
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.models.schedule_config import HolidayRule, ScheduleConfig, ShiftDefinition
from schedule_engine.schemas.room import RoomInfo, SubRoomInfo

CIVIL_TZ = ZoneInfo("Asia/Ho_Chi_Minh")


def civil(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Aware datetime in the clinic's civil timezone."""
    return datetime(year, month, day, hour, minute, tzinfo=CIVIL_TZ)


class FakeRoomDirectory(RoomDirectory):
    """In-memory room directory."""

    def __init__(self):
        self.rooms: List[RoomInfo] = []
        self.unavailable = False
        self.broken_room_ids = set()

    def add_room(
        self,
        room_id: str,
        sub_rooms: Optional[Dict[str, bool]] = None,
        is_active: bool = True,
        auto_schedule_enabled: bool = True,
    ) -> RoomInfo:
        room = RoomInfo(
            id=room_id,
            name=room_id.replace("-", " ").title(),
            is_active=is_active,
            auto_schedule_enabled=auto_schedule_enabled,
            sub_rooms=[
                SubRoomInfo(id=sub_room_id, name=sub_room_id, is_active=active)
                for sub_room_id, active in (sub_rooms or {}).items()
            ],
        )
        self.rooms = [existing for existing in self.rooms if existing.id != room_id] + [room]
        return room

    async def list_rooms(self) -> List[RoomInfo]:
        if self.unavailable:
            raise DependencyUnavailableError("Room directory is unavailable")
        return list(self.rooms)

    async def get_room_by_id(self, room_id: str) -> RoomInfo:
        if room_id in self.broken_room_ids:
            raise DependencyUnavailableError("Room directory timed out")
        return await super().get_room_by_id(room_id)


class RecordingPublisher(EventPublisher):
    """Event publisher that keeps envelopes in memory."""

    def __init__(self):
        self.envelopes: List[Dict[str, Any]] = []
        self.fail = False

    async def _send(self, event: str, envelope: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.envelopes.append(envelope)

    def events(self, name: str) -> List[Dict[str, Any]]:
        return [envelope["data"] for envelope in self.envelopes if envelope["event"] == name]


async def seed_schedule_config(session: AsyncSession, unit_duration: int = 15) -> ScheduleConfig:
    """Morning 08-12, afternoon 13-17, evening 18-21."""
    config = ScheduleConfig(
        unit_duration=unit_duration,
        max_booking_days=30,
        shifts=[
            ShiftDefinition(name="morning", label="Morning", start_time="08:00", end_time="12:00", position=0),
            ShiftDefinition(name="afternoon", label="Afternoon", start_time="13:00", end_time="17:00", position=1),
            ShiftDefinition(name="evening", label="Evening", start_time="18:00", end_time="21:00", position=2),
        ],
    )
    session.add(config)
    await session.commit()
    return config


async def seed_holiday(session: AsyncSession, **values) -> HolidayRule:
    rule = HolidayRule(is_active=True, **values)
    session.add(rule)
    await session.commit()
    return rule
