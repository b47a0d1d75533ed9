"""
Inbound room event schemas. Payloads come from the room service in camelCase.
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from schedule_engine.schemas.schedule import RoomGenerationReport


class RoomCreatedEvent(BaseModel):
    room_id: str = Field(..., alias="roomId")
    has_sub_rooms: bool = Field(False, alias="hasSubRooms")
    sub_room_ids: List[str] = Field(default_factory=list, alias="subRoomIds")

    class Config:
        populate_by_name = True


class SubRoomAddedEvent(BaseModel):
    room_id: str = Field(..., alias="roomId")
    sub_room_ids: List[str] = Field(..., alias="subRoomIds")

    class Config:
        populate_by_name = True


class RoomEventResult(BaseModel):
    """Best-effort handling result; never an error for the sender."""
    room_id: str
    handled: bool
    reason: Optional[str] = None
    reports: List[RoomGenerationReport] = []
