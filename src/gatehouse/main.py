"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. This is the single wiring point: logging, middleware,
exception handlers and routers are all registered here. Lifespan
manages startup/shutdown (database engine).
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from gatehouse import __version__
from gatehouse.api import api_router
from gatehouse.config import settings
from gatehouse.logging_config import configure_logging
from gatehouse.middleware.error_handler import register_exception_handlers
from gatehouse.middleware.request_id import RequestIdMiddleware
from gatehouse.middleware.request_logger import RequestLoggerMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "gatehouse.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("gatehouse.shutdown")

    from gatehouse.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="Gatehouse",
        description="User signup, login and OAuth identity linking with JWT bearer auth",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → RequestLogger → handler
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: gatehouse.main:app)
app = create_app()
