"""
Room directory schemas.

Rooms are owned by the room service; this service only reads the cached copy
it publishes. Field aliases follow that payload (`_id`, `isActive`, ...).
"""

from dataclasses import dataclass
from pydantic import BaseModel, Field
from typing import List, Optional


class SubRoomInfo(BaseModel):
    """Sub-room as exposed by the room directory."""
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")

    class Config:
        populate_by_name = True


class RoomInfo(BaseModel):
    """Room as exposed by the room directory."""
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")
    auto_schedule_enabled: bool = Field(True, alias="autoScheduleEnabled")
    sub_rooms: List[SubRoomInfo] = Field(default_factory=list, alias="subRooms")

    class Config:
        populate_by_name = True

    @property
    def has_sub_rooms(self) -> bool:
        return len(self.sub_rooms) > 0

    def find_sub_room(self, sub_room_id: str) -> Optional[SubRoomInfo]:
        for sub_room in self.sub_rooms:
            if sub_room.id == sub_room_id:
                return sub_room
        return None


@dataclass(frozen=True)
class RoomScope:
    """
    Generation target: a whole room (`sub_room_id is None`) or one of its
    sub-rooms.
    """
    room_id: str
    sub_room_id: Optional[str] = None

    @property
    def has_sub_room(self) -> bool:
        return self.sub_room_id is not None
