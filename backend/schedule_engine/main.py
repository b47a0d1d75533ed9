"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from schedule_engine.api.v1.router import api_router
from schedule_engine.core.config import settings
from schedule_engine.core.exceptions import setup_exception_handlers
from schedule_engine.core.logging import setup_logging, get_logger
from schedule_engine.core.rate_limit import limiter
from schedule_engine.db.session import init_db, close_db
from schedule_engine.deps.di_container import Container, configure_container

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Initializes logging, DB and the DI container; closes redis clients on shutdown.
    """
    # Startup
    setup_logging()

    await init_db(create_tables=settings.DB_CREATE_TABLES)

    container = configure_container(Container())
    app.state.container = container

    # Initialize global container instance
    import schedule_engine.deps.di_container as di_module
    di_module._container = container

    logger.info(
        f"{settings.PROJECT_NAME} started",
        extra={"environment": settings.ENVIRONMENT, "civil_timezone": settings.CIVIL_TIMEZONE},
    )

    yield

    # Shutdown
    await container.room_directory().close()
    await container.event_publisher().close()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Clinic room schedule and slot generation API",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Add root-level health endpoint for convenience
    from schedule_engine.api.v1.endpoints.health import get_health

    @app.get("/health", response_model=None, include_in_schema=False)
    async def root_health():
        """Root-level health check endpoint."""
        return await get_health()

    setup_exception_handlers(app)

    return app


app = create_app()
