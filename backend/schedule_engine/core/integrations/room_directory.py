"""
Read-only room directory.

The room service publishes its rooms (with sub-rooms) as a JSON list under a
redis key; the scheduling engine reads that cache through RoomDirectory and
never writes to it.
"""

import json
from abc import ABC, abstractmethod
from typing import List, Optional

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from schedule_engine.core.config import settings
from schedule_engine.core.exceptions import DependencyUnavailableError, NotFoundError
from schedule_engine.core.logging import get_logger
from schedule_engine.schemas.room import RoomInfo

logger = get_logger(__name__)


class RoomDirectory(ABC):
    """Read-through interface onto the room/sub-room directory."""

    @abstractmethod
    async def list_rooms(self) -> List[RoomInfo]:
        """Every room known to the directory."""

    async def list_active_rooms(self) -> List[RoomInfo]:
        """Active rooms with auto-scheduling enabled."""
        rooms = await self.list_rooms()
        return [room for room in rooms if room.is_active and room.auto_schedule_enabled]

    async def get_room_by_id(self, room_id: str) -> RoomInfo:
        """
        Get a room by ID.

        Raises:
            NotFoundError: room is not in the directory
            DependencyUnavailableError: directory cannot be read
        """
        for room in await self.list_rooms():
            if room.id == room_id:
                return room
        raise NotFoundError(f"Room {room_id} not found in room directory", details={"room_id": room_id})


class RedisRoomDirectory(RoomDirectory):
    """RoomDirectory backed by the room service's redis cache key."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        cache_key: Optional[str] = None,
        timeout: float = 2.0,
    ):
        """
        Initialize the directory.

        Args:
            redis_url: Redis connection URL (defaults to settings.REDIS_URL)
            cache_key: Key holding the rooms JSON list (defaults to settings.ROOMS_CACHE_KEY)
            timeout: Connect/read timeout in seconds
        """
        self.redis_url = redis_url or settings.REDIS_URL
        self.cache_key = cache_key or settings.ROOMS_CACHE_KEY
        self.timeout = timeout
        self._client: Optional[redis.Redis] = None

    def _get_client(self) -> redis.Redis:
        """Lazy load Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=self.timeout,
                socket_timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        try:
            return bool(await self._get_client().ping())
        except RedisError:
            return False

    async def list_rooms(self) -> List[RoomInfo]:
        try:
            raw = await self._get_client().get(self.cache_key)
        except RedisError as exc:
            logger.error("Room directory unreachable", extra={"cache_key": self.cache_key, "error": str(exc)})
            raise DependencyUnavailableError("Room directory is unavailable") from exc

        if not raw:
            raise DependencyUnavailableError(
                "Room directory cache is empty",
                details={"cache_key": self.cache_key},
            )

        try:
            payload = json.loads(raw)
            return [RoomInfo.model_validate(item) for item in payload]
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.error("Room directory payload is unreadable", extra={"cache_key": self.cache_key})
            raise DependencyUnavailableError("Room directory payload is unreadable") from exc
