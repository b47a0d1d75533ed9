"""
FastAPI dependencies for the external collaborators.
Tests replace these through `app.dependency_overrides`.
"""

from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.deps.di_container import get_container


def get_room_directory() -> RoomDirectory:
    return get_container().room_directory()


def get_event_publisher() -> EventPublisher:
    return get_container().event_publisher()
