"""
Base service class.
Services contain business logic, coordinate repositories and own the commit.
"""

from abc import ABC
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import AppException


class BaseService(ABC):
    """Base service class for all services."""

    session: AsyncSession

    async def rollback_and_refresh(self, *instances: Any) -> None:
        """
        Roll back the current unit of work and reload the given persistent
        instances, which a rollback leaves expired.
        """
        await self.session.rollback()
        for instance in instances:
            await self.session.refresh(instance)

    @staticmethod
    def reason_of(exc: Exception) -> str:
        """Short machine-readable reason for a per-item failure."""
        if isinstance(exc, AppException):
            if isinstance(exc.details, dict) and exc.details.get("reason"):
                return exc.details["reason"]
            return exc.message
        return type(exc).__name__
