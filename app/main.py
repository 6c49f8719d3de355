"""Files Manager API - Main Application Module.

This module initializes the FastAPI application with its configuration,
exception handling, routing, and the lifecycle of the shared client handles.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import EnvironmentEnum, settings
from app.core.dependencies import get_resources
from app.core.logging_config import setup_logging
from app.core.resources import AppResources, build_resources

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the client handles at startup and release them at shutdown."""
    logger.info("Starting %s...", settings.app_name)

    resources: Optional[AppResources] = getattr(app.state, "resources", None)
    owns_resources = resources is None
    if owns_resources:
        resources = build_resources(settings)
        app.state.resources = resources

    # Development mode: auto-create tables if they don't exist
    if settings.environment in (EnvironmentEnum.development, EnvironmentEnum.testing):
        await resources.database.create_all()
        logger.info("Database tables created/verified")

    await resources.start()

    yield

    logger.info("Shutting down %s...", settings.app_name)
    if owns_resources:
        await resources.close()
        app.state.resources = None
    else:
        await resources.thumbnails.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Token-authenticated file storage with image thumbnails",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, message)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "status": "error",
                "message": message,
                "error_code": error_code,
                "details": details,
                "timestamp": _timestamp(),
                "request_id": getattr(request.state, "request_id", None),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": error.get("loc", []),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content={
                "status": "error",
                "message": "Validation error",
                "error_code": "VALIDATION_ERROR",
                "details": errors,
                "timestamp": _timestamp(),
                "request_id": getattr(request.state, "request_id", None),
            },
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    from app.domains.auth.controller import router as auth_router
    from app.domains.file.controller import router as file_router
    from app.domains.user.controller import router as user_router

    @app.get("/status")
    async def get_status(resources: AppResources = Depends(get_resources)):
        """Report whether Redis and the database are reachable."""
        return await resources.status()

    @app.get("/stats")
    async def get_stats(resources: AppResources = Depends(get_resources)):
        """Report the number of users and files."""
        return {
            "users": await resources.database.count_users(),
            "files": await resources.database.count_files(),
        }

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(file_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="info",
    )


if __name__ == "__main__":
    main()
