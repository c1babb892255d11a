"""Personal assistant gateway - application entry point.

Entry points:
    - /health - Health check endpoint
    - /api/v1/media/capabilities - How each media capability resolves
    - /api/v1/media/{capability}/run - Run a capability over uploaded attachments
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.clients.ai import close_ai_clients
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from core.observability import register_http_request_logging
from core.pydantic_schemas import error as api_error
from core.utils.env import is_production
from features.media_understanding.routes import router as media_router

# Track startup time in non-production environments
start_time = time.time() if not is_production() else None

setup_logging()

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events."""
    yield
    logger.info("Application shutting down...")
    await close_ai_clients()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Application factory returning a configured FastAPI instance."""

    app = FastAPI(
        title="Assistant Gateway",
        description="Media understanding capabilities for inbound assistant messages",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    if is_production():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        """Return a structured API envelope for configuration errors."""

        payload = api_error(
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=str(exc),
            data={"key": exc.key} if getattr(exc, "key", None) else None,
        )
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": APP_VERSION}

    register_http_request_logging(app)

    app.include_router(media_router)

    timing_info = ""
    if start_time is not None:
        timing_info = f" (loaded in {time.time() - start_time:.2f}s)"

    logger.info(f"Application created with media router{timing_info}")
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
