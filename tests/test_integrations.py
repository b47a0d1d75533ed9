"""
Redis-backed room directory and event publisher tests.
"""

import json
import logging

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from schedule_engine.core.exceptions import DependencyUnavailableError, NotFoundError
from schedule_engine.core.integrations.events import ROOM_SCHEDULE_UPDATED, RedisEventPublisher
from schedule_engine.core.integrations.room_directory import RedisRoomDirectory

ROOMS = [
    {"_id": "room-a", "name": "Room A", "isActive": True, "autoScheduleEnabled": True, "subRooms": []},
    {
        "_id": "room-b",
        "isActive": True,
        "autoScheduleEnabled": False,
        "subRooms": [{"_id": "sub-1", "isActive": True}, {"_id": "sub-2", "isActive": False}],
    },
    {"_id": "room-c", "isActive": False},
]


class StubRedis:
    """Just enough of redis.asyncio.Redis for the integrations."""

    def __init__(self, values=None, error=None):
        self.values = values or {}
        self.error = error
        self.published = []

    async def get(self, key):
        if self.error:
            raise self.error
        return self.values.get(key)

    async def publish(self, channel, message):
        if self.error:
            raise self.error
        self.published.append((channel, json.loads(message)))
        return 1

    async def ping(self):
        if self.error:
            raise self.error
        return True

    async def aclose(self):
        pass


def _directory(client):
    directory = RedisRoomDirectory(redis_url="redis://stub", cache_key="rooms_cache")
    directory._client = client
    return directory


async def test_room_directory_reads_cached_rooms():
    directory = _directory(StubRedis({"rooms_cache": json.dumps(ROOMS)}))

    rooms = await directory.list_rooms()
    assert [room.id for room in rooms] == ["room-a", "room-b", "room-c"]
    assert [room.id for room in await directory.list_active_rooms()] == ["room-a"]

    room_b = await directory.get_room_by_id("room-b")
    assert room_b.has_sub_rooms is True
    assert room_b.find_sub_room("sub-2").is_active is False
    assert await directory.ping() is True

    with pytest.raises(NotFoundError):
        await directory.get_room_by_id("room-x")


@pytest.mark.parametrize("values", [{}, {"rooms_cache": "not json"}, {"rooms_cache": json.dumps([{"name": "x"}])}])
async def test_room_directory_rejects_missing_or_unreadable_cache(values):
    with pytest.raises(DependencyUnavailableError):
        await _directory(StubRedis(values)).list_rooms()


async def test_room_directory_logs_unreachable_redis(caplog):
    directory = _directory(StubRedis(error=RedisConnectionError("connection refused")))

    with caplog.at_level(logging.ERROR, logger="schedule_engine.core.integrations.room_directory"):
        with pytest.raises(DependencyUnavailableError):
            await directory.list_rooms()

    assert await directory.ping() is False
    assert [record.name for record in caplog.records] == ["schedule_engine.core.integrations.room_directory"]
    assert caplog.records[0].cache_key == "rooms_cache"


async def test_publisher_sends_envelopes_on_channel():
    client = StubRedis()
    publisher = RedisEventPublisher(redis_url="redis://stub", channel="schedule-events")
    publisher._client = client

    assert await publisher.sub_room_schedule_created("room-b", ["sub-1"]) is True

    channel, envelope = client.published[0]
    assert channel == "schedule-events"
    assert envelope["event"] == "subroom.schedule.created"
    assert envelope["data"] == {"roomId": "room-b", "subRoomIds": ["sub-1"], "hasBeenUsed": True}
    assert "published_at" in envelope


async def test_publisher_failure_is_logged_not_raised(caplog):
    publisher = RedisEventPublisher(redis_url="redis://stub")
    publisher._client = StubRedis(error=RedisConnectionError("connection refused"))

    with caplog.at_level(logging.WARNING, logger="schedule_engine.core.integrations.events"):
        assert await publisher.publish(ROOM_SCHEDULE_UPDATED, {"roomId": "room-a"}) is False

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert [record.name for record in warnings] == ["schedule_engine.core.integrations.events"]
    assert warnings[0].event == ROOM_SCHEDULE_UPDATED
