"""FastAPI dev server application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from reloadr.config import Settings
from reloadr.lifecycle import LiveReloadState
from reloadr.live import log_change, start_live_reload
from reloadr.middleware.logging import RequestLoggingMiddleware
from reloadr.routes import events, health, pages

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Starts live reload on the configured watch paths and cancels it on
    shutdown, waiting for the watches to be released.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("dev_server_startup", host=settings.host, port=settings.port)

    live_reload = start_live_reload(
        settings.endpoint,
        log_change,
        *settings.watch_paths,
        state=app.state.live_reload_state,
        settings=settings,
    )
    app.state.live_reload = live_reload

    try:
        yield
    finally:
        live_reload.cancel()
        await live_reload.wait_closed()
        logger.info("dev_server_shutdown")


def create_app(
    settings: Settings | None = None,
    state: LiveReloadState | None = None,
) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        state: Single-instance state for live reload. A fresh one if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="reloadr dev server",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.live_reload_state = state if state is not None else LiveReloadState()

    app.add_middleware(RequestLoggingMiddleware, stream_path=settings.endpoint)

    app.include_router(health.router)
    app.add_api_route(
        settings.endpoint,
        events.event_stream,
        methods=["GET"],
        tags=["events"],
        include_in_schema=False,
    )
    app.include_router(pages.router)

    return app
