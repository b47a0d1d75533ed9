"""
Dependency injection container using dependency-injector.
Wires the external collaborators (room directory, event publisher) and the
health check.
"""

from dependency_injector import containers, providers

from schedule_engine.core.integrations.events import RedisEventPublisher
from schedule_engine.core.integrations.room_directory import RedisRoomDirectory
from schedule_engine.db.session import get_sessionmaker
from schedule_engine.services.health_service import HealthService
from schedule_engine.controllers.health_controller import HealthController


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Configuration()

    # Sessionmaker for code that runs outside a request
    session_factory = providers.Callable(get_sessionmaker)

    # External collaborators
    room_directory = providers.Singleton(
        RedisRoomDirectory,
        redis_url=config.redis_url,
        cache_key=config.rooms_cache_key,
    )

    event_publisher = providers.Singleton(
        RedisEventPublisher,
        redis_url=config.redis_url,
        channel=config.events_channel,
    )

    # Services
    health_service = providers.Singleton(
        HealthService,
        room_directory=room_directory,
        session_factory=session_factory.provider,
    )

    # Controllers
    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )


# Global container instance
_container: Container = None


def configure_container(container: Container) -> Container:
    from schedule_engine.core.config import settings

    container.config.from_dict({
        "database_url": settings.DATABASE_URL,
        "redis_url": settings.REDIS_URL,
        "rooms_cache_key": settings.ROOMS_CACHE_KEY,
        "events_channel": settings.EVENTS_CHANNEL,
    })
    return container


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = configure_container(Container())
    return _container
