"""
API v1 router that aggregates all endpoint routers.
Authentication is handled upstream by the API gateway.
"""

from fastapi import APIRouter

from schedule_engine.api.v1.endpoints import (
    health,
    schedule_config,
    schedules,
    slots,
    auto_schedule,
    room_events,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(schedule_config.router, tags=["schedule-config"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
api_router.include_router(slots.router, prefix="/slots", tags=["slots"])
api_router.include_router(auto_schedule.router, prefix="/auto-schedule", tags=["auto-schedule"])
api_router.include_router(room_events.router, prefix="/room-events", tags=["room-events"])
