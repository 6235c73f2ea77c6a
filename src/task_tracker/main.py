from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ServerError, TrackerError, Unauthenticated
from .logging_setup import setup_logging
from .repositories import Stores, build_stores
from .routers import tasks as tasks_router
from .routers import users as users_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "tasks", "description": "Create, list, toggle and delete the caller's own tasks."},
    {"name": "users", "description": "Registration, login and the caller's own profile."},
]


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        """
        Translate typed failures into responses. Each kind has its own status;
        server-side failures never expose their internal message.
        """
        if isinstance(exc, ServerError):
            logger.error("Server error on %s %s: %s", request.method, request.url.path, exc.message)
            return JSONResponse(status_code=exc.status_code, content=ServerError().to_dict())

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                # ctx may hold the raw exception object, which is not JSON serializable
                "detail": [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()],
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=ServerError().to_dict())


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, stores: Optional[Stores] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Explicit settings; read from the environment when omitted.
        stores: Explicit stores; built from settings when omitted.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Task Tracker",
        description="Per-user task tracker API: every task is visible and mutable only by its owner.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.stores = stores or build_stores(settings)

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(tasks_router.router)
    app.include_router(users_router.router)
    return app


# Logging is configured by whoever runs the process, never on import.
app = create_app()


if __name__ == "__main__":
    import uvicorn

    setup_logging(app.state.settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)
