"""
Health service.
Reports database, config and room directory health.
"""

import time
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from schedule_engine.core.config import settings
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.exceptions import DependencyUnavailableError
from schedule_engine.db.repositories.health_repository import HealthRepository
from schedule_engine.db.session import get_sessionmaker
from schedule_engine.services.base_service import BaseService
from schedule_engine.schemas.health import HealthResponse


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(
        self,
        room_directory: Optional[RoomDirectory] = None,
        session_factory: Optional[Callable[[], async_sessionmaker]] = None,
    ):
        self.start_time = time.time()
        self.room_directory = room_directory
        self.session_factory = session_factory or get_sessionmaker

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {}

        try:
            async with self.session_factory()() as session:
                repo = HealthRepository(session=session)
                db_status = await repo.check_database()
                checks["database"] = "ok" if db_status else "error"
                if db_status:
                    checks["schedule_config"] = "ok" if await repo.has_schedule_config() else "missing"
        except (SQLAlchemyError, OSError) as e:
            checks["database"] = f"error: {str(e)}"

        if self.room_directory is not None:
            try:
                rooms = await self.room_directory.list_rooms()
                checks["room_directory"] = "ok"
                checks["rooms"] = len(rooms)
            except DependencyUnavailableError as e:
                checks["room_directory"] = f"error: {e.message}"

        failing = [
            name for name in ("database", "room_directory")
            if name in checks and checks[name] != "ok"
        ]
        status = "ok" if not failing and checks.get("schedule_config", "ok") == "ok" else "degraded"

        return HealthResponse(
            status=status,
            version=settings.VERSION,
            environment=settings.ENVIRONMENT,
            uptime=uptime_str,
            checks=checks,
        )
