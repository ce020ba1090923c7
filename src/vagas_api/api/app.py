import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from vagas_api.api.middleware import (
    ErrorHandlerMiddleware,
    RateLimiterMiddleware,
    validation_exception_handler,
)
from vagas_api.api.routers.bookings import router as bookings_router
from vagas_api.api.routers.facilities import router as facilities_router
from vagas_api.api.routers.health import router as health_router
from vagas_api.api.routers.internal import router as internal_router
from vagas_api.api.routers.notifications import router as notifications_router
from vagas_api.shared.config import ApplicationContainer, settings

logger = logging.getLogger(__name__)


def create_app(container: ApplicationContainer | None = None) -> FastAPI:
    """Build and configure the FastAPI application instance."""
    container = container or ApplicationContainer(settings)
    app_settings = container.settings

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and release shared app resources."""
        await container.startup()
        logger.info("app_started env=%s", app_settings.app_env)
        try:
            yield
        finally:
            await container.shutdown()

    app = FastAPI(
        title=app_settings.app_name,
        debug=app_settings.app_debug,
        version=app_settings.app_version,
        lifespan=app_lifespan,
    )
    app.state.container = container
    if app_settings.cors_allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_allowed_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(
        RateLimiterMiddleware,
        default_limit_per_minute=app_settings.rate_limit_requests_per_minute,
        bookings_limit_per_minute=app_settings.rate_limit_bookings_per_minute,
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(bookings_router, prefix="/api/v1")
    app.include_router(facilities_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(internal_router, prefix="/api/v1")
    return app
