from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError

from hostel_occupancy.api.responses import error_response, exception_response
from hostel_occupancy.api.v1.router import router as api_v1_router
from hostel_occupancy.core.config import settings
from hostel_occupancy.core.exceptions import BaseAppException, ErrorCode
from hostel_occupancy.core.logging import get_logger, setup_logging
from hostel_occupancy.core.middleware import register_middlewares
from hostel_occupancy.db.session import init_db

logger = get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure in the standard error envelope."""

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        return exception_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
            status_code=422,
        )

    @app.exception_handler(PydanticValidationError)
    async def schema_validation_handler(request: Request, exc: PydanticValidationError):
        return error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            {"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
            status_code=422,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error: {exc}",
            exc_info=True,
            extra={"path": str(request.url.path), "method": request.method},
        )
        return error_response(ErrorCode.INTERNAL_ERROR, "Internal server error", status_code=500)


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        version=settings.PROJECT_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register shared core middlewares (request ID, timing, error logging)
    register_middlewares(app)
    register_exception_handlers(app)

    # Mount API v1 under /api/v1
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # Create tables outside production (use migrations there)
    @app.on_event("startup")
    def on_startup() -> None:
        if not settings.is_production:
            init_db()

    return app


app = create_app()
