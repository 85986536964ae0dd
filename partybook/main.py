"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from partybook.api.v1.router import api_router
from partybook.config import settings
from partybook.core.background_tasks import (
    start_status_sweep_scheduler,
    stop_status_sweep_scheduler,
)
from partybook.core.exceptions import AppException
from partybook.core.middleware import RequestLoggingMiddleware
from partybook.database import close_db, init_db
from partybook.services.notification_service import notification_channel

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Background task handle
_status_sweep_task: asyncio.Task | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    global _status_sweep_task

    # Startup
    if settings.debug:
        await init_db()

    await notification_channel.start()

    if settings.status_sweep_enabled:
        _status_sweep_task = asyncio.create_task(start_status_sweep_scheduler())

    yield

    # Shutdown
    stop_status_sweep_scheduler()
    if _status_sweep_task:
        _status_sweep_task.cancel()
        try:
            await _status_sweep_task
        except asyncio.CancelledError:
            pass
        _status_sweep_task = None

    await notification_channel.stop()
    await close_db()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="PartyBook - DJ booking lifecycle API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
            headers=exc.headers,
        )

    # Middleware (order matters - first added = last executed)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness plus the state of the booking status sweep."""
        sweep_running = _status_sweep_task is not None and not _status_sweep_task.done()
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "status_sweep": "running" if sweep_running else "stopped",
            "notification_backend": notification_channel.backend,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "partybook.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
