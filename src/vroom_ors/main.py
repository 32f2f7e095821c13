"""FastAPI application entry point."""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import health, matrix, solve
from .config import settings
from .errors import MissingLocationError, ProblemValidationError, UpstreamError, VroomOrsError

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = ("/health", "/solve", "/matrix")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_response(status_code: int, error: str, message: str, exc: BaseException | None = None, **extra) -> JSONResponse:
    body = {"success": False, "error": error, "message": message, **extra}
    if exc is not None and settings.is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=body)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProblemValidationError)
    async def _invalid_problem(request: Request, exc: ProblemValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(exc))

    @app.exception_handler(MissingLocationError)
    async def _missing_location(request: Request, exc: MissingLocationError) -> JSONResponse:
        return _error_response(
            status.HTTP_400_BAD_REQUEST, "Invalid problem", str(exc), entity_id=exc.entity_id
        )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request body",
            "Request body failed validation",
            details=jsonable_errors(exc),
        )

    @app.exception_handler(UpstreamError)
    async def _upstream_failure(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.exception(f"Upstream failure on {request.url.path}: {exc}")
        return _error_response(
            status.HTTP_502_BAD_GATEWAY,
            f"{exc.service} request failed",
            str(exc),
            exc,
            upstream_status=exc.status_code,
        )

    @app.exception_handler(VroomOrsError)
    async def _internal_failure(request: Request, exc: VroomOrsError) -> JSONResponse:
        logger.exception(f"Error handling {request.url.path}: {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc), exc)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "An unexpected error occurred", exc
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error_response(
                exc.status_code,
                "Not found",
                f"Endpoint {request.method} {request.url.path} not found",
                availableEndpoints=[f"{settings.api_prefix}{path}" for path in AVAILABLE_ENDPOINTS],
            )
        return _error_response(exc.status_code, "HTTP error", str(exc.detail))


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version=settings.app_version)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "version": settings.app_version,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    _register_exception_handlers(app)
    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(solve.router, prefix=settings.api_prefix)
    app.include_router(matrix.router, prefix=settings.api_prefix)
    return app


configure_logging()
app = create_app()
