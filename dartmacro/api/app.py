"""FastAPI application factory"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..client.core.config import ClientSettings, get_settings
from ..client.core.logging import setup_logging
from ..client.session import MacroSession
from .routers import (
    aliases_router,
    session_router,
    timers_router,
    triggers_router,
    variables_router,
)

logger = logging.getLogger(__name__)


def _detached_send(text: str) -> None:
    logger.warning(f"No connection attached, dropping {text!r}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    session: MacroSession = app.state.session

    # Startup
    logger.info("Starting DartMacro panel API")
    await session.load()

    yield

    # Shutdown
    logger.info("Shutting down DartMacro panel API")
    session.on_disconnected()
    try:
        await session.flush()
    except OSError as e:
        logger.exception(f"Error flushing macros during shutdown: {e}")


def create_app(
    session: MacroSession | None = None,
    settings: ClientSettings | None = None,
    *,
    configure_logging: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or get_settings()

    # Setup logging first
    if configure_logging:
        setup_logging(settings)

    app = FastAPI(
        title="DartMacro API",
        description="Panel API for the DartMUD command macro engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session = session or MacroSession(_detached_send, settings=settings)

    # Register routers
    app.include_router(aliases_router.router)
    app.include_router(triggers_router.router)
    app.include_router(timers_router.router)
    app.include_router(variables_router.router)
    app.include_router(session_router.router)

    logger.info("FastAPI application configured")

    return app
