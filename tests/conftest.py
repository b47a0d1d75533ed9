"""
Pytest configuration and fixtures.
Provides the test app client, an in-memory database and fakes for the room
directory and event publisher.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CIVIL_TIMEZONE", "Asia/Ho_Chi_Minh")

import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import schedule_engine.models  # noqa: F401
from schedule_engine.db.base import Base
from schedule_engine.db.session import get_db
from schedule_engine.deps.di_container import get_container
from schedule_engine.deps.integrations import get_event_publisher, get_room_directory
from schedule_engine.main import app
from schedule_engine.models.schedule_config import HolidayRule, ScheduleConfig
from schedule_engine.services.health_service import HealthService
from tests.factories import FakeRoomDirectory, RecordingPublisher, seed_holiday, seed_schedule_config


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
async def test_db_session(test_session_maker):
    """
    Create a test database session.
    Uses in-memory SQLite for fast tests.
    """
    async with test_session_maker() as session:
        yield session


@pytest.fixture
def room_directory() -> FakeRoomDirectory:
    """room-a has no sub-rooms; room-b has active sub-1 and inactive sub-2."""
    directory = FakeRoomDirectory()
    directory.add_room("room-a")
    directory.add_room("room-b", sub_rooms={"sub-1": True, "sub-2": False})
    return directory


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
async def schedule_config(test_db_session) -> ScheduleConfig:
    return await seed_schedule_config(test_db_session)


@pytest.fixture
async def sunday_holiday(test_db_session) -> HolidayRule:
    return await seed_holiday(test_db_session, name="Sunday", is_recurring=True, day_of_week=1)


@pytest.fixture(scope="function")
async def test_client(test_session_maker, room_directory, publisher):
    """
    Create a test HTTP client wired to the in-memory database and fakes.
    """
    async def override_get_db():
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_room_directory] = lambda: room_directory
    app.dependency_overrides[get_event_publisher] = lambda: publisher

    container = get_container()
    container.health_service.override(
        providers.Singleton(
            HealthService,
            room_directory=room_directory,
            session_factory=lambda: test_session_maker,
        )
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    container.health_service.reset_override()
    app.dependency_overrides.clear()
