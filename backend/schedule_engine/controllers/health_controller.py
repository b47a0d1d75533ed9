"""
Health controller.
Coordinates health service to return health status.
"""

from schedule_engine.controllers.base_controller import BaseController
from schedule_engine.schemas.health import HealthResponse
from schedule_engine.services.health_service import HealthService


class HealthController(BaseController):
    """Controller for health check operations."""

    def __init__(self, health_service: HealthService):
        self.health_service = health_service

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, version, uptime, and checks
        """
        return await self.health_service.get_health()
