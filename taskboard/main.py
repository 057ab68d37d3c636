"""FastAPI main application with app factory and route configuration."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .deps import get_settings
from .errors import TaskboardError
from .routes import activities, tasks
from .schemas import HealthResponse
from .services.activity_recorder import ActivityRecorder
from .services.identity import IdentityProvider
from .services.task_service import TaskService
from .services.task_store import TaskStore
from .utils.logging import configure_request_logging, log_shutdown_info, log_startup_info, setup_logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the service objects for this application instance.

    Args:
        app: FastAPI application instance
    """
    settings: Settings = app.state.settings

    try:
        setup_logging(settings)
        log_startup_info(settings)

        store = TaskStore()
        recorder = ActivityRecorder()
        app.state.task_service = TaskService(store, recorder)
        app.state.identity_provider = IdentityProvider(settings)
        logger.info("Application startup completed successfully")

    except Exception as e:
        logger.error(f"Error during application startup: {str(e)}")
        raise

    yield

    log_shutdown_info(settings)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Personal task board with an activity trail and due-date urgency",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[tasks.AUDIT_STATUS_HEADER],
    )

    app.middleware("http")(configure_request_logging())

    @app.exception_handler(TaskboardError)
    async def taskboard_exception_handler(request: Request, exc: TaskboardError):
        """Report domain errors with their status code."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{type(exc).__name__}: {exc.message} for {request.method} {request.url.path}")

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "status_code": exc.status_code,
                "path": request.url.path,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with proper logging."""
        logger.warning(
            f"HTTP {exc.status_code}: {exc.detail} for {request.method} {request.url.path}"
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code,
                "path": request.url.path,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed requests as 400 with field details."""
        logger.warning(
            f"Validation error for {request.method} {request.url.path}: {exc.errors()}"
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Validation error",
                "details": jsonable_encoder(exc.errors()),
                "status_code": 400,
                "path": request.url.path,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            f"Unexpected error for {request.method} {request.url.path}: {str(exc)}",
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "status_code": 500,
                "path": request.url.path,
            },
        )

    @app.get("/healthz", response_model=HealthResponse, tags=["health"])
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint for monitoring and load balancers."""
        task_service = getattr(request.app.state, "task_service", None)
        identity_provider = getattr(request.app.state, "identity_provider", None)

        services = {
            "task_service": "initialized" if task_service else "not_initialized",
            "identity_provider": "initialized" if identity_provider else "not_initialized",
        }

        return HealthResponse(
            status="healthy" if task_service and identity_provider else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=VERSION,
            services=services,
        )

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": VERSION,
            "docs_url": "/docs",
            "health_check": "/healthz",
            "endpoints": {
                "tasks": "/tasks",
                "overdue_tasks": "/tasks/overdue",
                "activities": "/activities",
            },
        }

    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
    app.include_router(activities.router, prefix="/activities", tags=["activities"])

    logger.info("FastAPI application created and configured")

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "taskboard.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
