"""
FastAPI application wiring for the session service.

create_app() builds an application with structured logging, request
correlation, error handlers and cache-backed sessions. Routes obtain the
current session with the get_session dependency.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from cache.base import Cache
from cache.factory import create_cache
from cache.redis_cache import RedisCache
from config.settings import Settings, get_environment_info, get_settings, validate_startup
from errors.handlers import register_exception_handlers
from middleware.request_id import RequestIDMiddleware
from middleware.session import setup_sessions
from session.config import SessionConfig
from session.handler import SessionHandler
from telemetry.service import initialize_telemetry

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, cache: Optional[Cache] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment if omitted.
        cache: Cache for session records, built from settings if omitted.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()
    validate_startup(settings)
    initialize_telemetry(settings)

    if cache is None:
        cache = create_cache(settings)
    handler = SessionHandler(cache, SessionConfig.from_settings(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(cache, RedisCache) and cache.client is None:
            await cache.connect()
        logger.info("Session service started", extra={"extra_data": {
            "environment": settings.environment.value,
            "cache_backend": type(cache).__name__,
            "env_files_loaded": get_environment_info()["env_files_loaded"],
        }})
        await handler.gc(settings.session_lifetime_seconds)

        yield

        if isinstance(cache, RedisCache):
            await cache.disconnect()
        logger.info("Session service stopped")

    app = FastAPI(title="Nova Session Service", version="1.0.0", lifespan=lifespan)
    app.state.session_handler = handler

    register_exception_handlers(app)

    # Added first so that it runs inside RequestIDMiddleware and its logs
    # carry the request id
    setup_sessions(app, handler, settings)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    async def health():
        """Report whether the session cache is reachable."""
        healthy = await cache.health_check()
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "session_store": type(cache).__name__,
            },
        )

    return app


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=port, log_level="info")
