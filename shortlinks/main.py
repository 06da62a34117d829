"""Shortlinks - Main FastAPI Application.

An in-memory URL shortening service with:
- Create short URLs with optional custom shortcodes
- Time-limited links (validity in minutes)
- Redirect to original URLs
- Per-click statistics
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import Settings, settings as default_settings
from .core.errors import RegistryError
from .core.log_sink import LogSink
from .core.registry import ShortcodeRegistry
from .api.routes import health_router, urls_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info(f"Starting {app.title}...")
    yield
    # Shutdown
    logger.info("Shutting down Shortlinks...")
    app.state.sink.close()


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ShortcodeRegistry] = None,
    sink: Optional[LogSink] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. Defaults to the global settings.
        registry: Shortcode registry. A fresh one is built when omitted.
        sink: Log sink shared by the middleware and the registry.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or default_settings
    sink = sink or (registry.sink if registry else LogSink.from_settings(settings))
    registry = registry or ShortcodeRegistry.from_settings(settings, sink=sink)

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sink = sink
    app.state.registry = registry
    app.state.started_at = time.monotonic()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Report every request and its outcome to the log sink."""
        start = time.perf_counter()
        sink.info("middleware", f"{request.method} {request.url.path}")
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        sink.notify(
            "error" if response.status_code >= 400 else "info",
            "middleware",
            f"{request.method} {request.url.path} - {response.status_code} - {duration_ms}ms",
        )
        return response

    @app.exception_handler(RegistryError)
    async def registry_exception_handler(request: Request, exc: RegistryError):
        """Map registry failures to their HTTP status."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.error_code},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Report malformed requests as 400 with the first validation message."""
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        sink.warn("controller", f"Validation error: {message}")
        return JSONResponse(
            status_code=400,
            content={"detail": message, "error_code": "VALIDATION_ERROR"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Keep framework errors in the same shape as registry errors."""
        if exc.status_code == 404:
            content = {"detail": "Not found", "error_code": "NOT_FOUND"}
        else:
            content = {"detail": str(exc.detail), "error_code": str(exc.status_code)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """General exception handler."""
        logger.error(f"Unhandled Exception: {exc}")
        sink.error("middleware", f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(urls_router)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        app,
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
