from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .errors import NotFoundError, ValidationError
from .repositories import InMemoryTodoRepository, InMemoryUserRepository
from .routers import todos as todos_router
from .routers import users as users_router
from .scheduler import ThreadScheduler
from .service import TodoService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

REMINDER_TASK_NAME = "process-due-reminders"

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Create and look up users."},
    {
        "name": "todos",
        "description": "Create, list and complete todos with optional reminders.",
    },
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    service: Optional[TodoService] = None,
    scheduler: Optional[ThreadScheduler] = None,
) -> FastAPI:
    """
    Build the FastAPI application and its collaborators.

    The reminder sweep is registered on the scheduler when the application
    starts and every scheduled task is stopped when it shuts down. Callers may
    inject a service or scheduler (tests do); otherwise in-memory stores and a
    fresh ThreadScheduler are created.
    """
    settings = settings or get_settings()
    service = service or TodoService(InMemoryTodoRepository(), InMemoryUserRepository())
    scheduler = scheduler or ThreadScheduler()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler.schedule_recurring(
            REMINDER_TASK_NAME, settings.reminder_interval_seconds, service.process_reminders
        )
        logger.info(
            "Reminder processing job scheduled to run every %s seconds",
            settings.reminder_interval_seconds,
        )
        try:
            yield
        finally:
            logger.info("Shutting down scheduler")
            scheduler.stop_all(wait=True, timeout=5.0)

    app = FastAPI(
        title="Todo Reminder Service",
        description="Todos with reminders that a background sweep promotes to REMINDER_DUE.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.todo_service = service
    app.state.scheduler = scheduler

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for malformed requests.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # Internal details are logged, never returned
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"], response_class=PlainTextResponse)
    def health_check() -> str:
        """
        Health check endpoint.

        Returns:
            A plain-text liveness message.
        """
        return "Todo Reminder Service is running."

    app.include_router(users_router.router)
    app.include_router(todos_router.router)
    return app


app = create_app()
