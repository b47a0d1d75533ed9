"""
Outbound schedule events.

Events are fire-and-forget and delivered at least once; consumers are
idempotent. A publishing failure is logged and never fails the operation that
produced the event.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from schedule_engine.core.config import settings
from schedule_engine.core.logging import get_logger

logger = get_logger(__name__)

ROOM_SCHEDULE_UPDATED = "room.schedule.updated"
SUBROOM_SCHEDULE_CREATED = "subroom.schedule.created"


class EventPublisher(ABC):
    """Outbound event sink."""

    @abstractmethod
    async def _send(self, event: str, envelope: Dict[str, Any]) -> None:
        """Deliver one envelope to the transport."""

    async def publish(self, event: str, data: Dict[str, Any]) -> bool:
        """
        Publish an event, swallowing transport failures.

        Returns:
            True if the transport accepted the event
        """
        envelope = {
            "event": event,
            "data": data,
            "published_at": datetime.now(tz=timezone.utc).isoformat(),
        }
        try:
            await self._send(event, envelope)
        except Exception as exc:  # any transport error
            logger.warning(
                f"Failed to publish {event}",
                extra={"event": event, "error": str(exc)},
            )
            return False
        logger.info(f"Published {event}", extra={"event": event})
        return True

    async def room_schedule_updated(self, room_id: str, last_schedule_generated: datetime) -> bool:
        return await self.publish(
            ROOM_SCHEDULE_UPDATED,
            {
                "roomId": room_id,
                "hasBeenUsed": True,
                "lastScheduleGenerated": last_schedule_generated.isoformat(),
            },
        )

    async def sub_room_schedule_created(self, room_id: str, sub_room_ids: List[str]) -> bool:
        return await self.publish(
            SUBROOM_SCHEDULE_CREATED,
            {
                "roomId": room_id,
                "subRoomIds": list(sub_room_ids),
                "hasBeenUsed": True,
            },
        )


class RedisEventPublisher(EventPublisher):
    """Publishes JSON envelopes on a redis pub/sub channel."""

    def __init__(self, redis_url: Optional[str] = None, channel: Optional[str] = None, timeout: float = 2.0):
        self.redis_url = redis_url or settings.REDIS_URL
        self.channel = channel or settings.EVENTS_CHANNEL
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

    async def _send(self, event: str, envelope: Dict[str, Any]) -> None:
        await self._get_client().publish(self.channel, json.dumps(envelope))
