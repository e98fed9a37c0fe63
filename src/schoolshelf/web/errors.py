"""Exception handlers producing ``{"error": message}`` responses.

Domain errors carry their own status. Database constraint violations that
escape service-level checks are classified by the driver's error name.
"""

from __future__ import annotations

import traceback

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schoolshelf.core.errors import AppError

logger = structlog.get_logger(__name__)

RECORD_EXISTS = "Record already exists"
INVALID_REFERENCE = "Invalid reference"
INVALID_DATA = "Invalid data format"

# sqlite extended result code names -> (status, message)
_CONSTRAINT_ERRORS: dict[str, tuple[int, str]] = {
    "SQLITE_CONSTRAINT_UNIQUE": (status.HTTP_409_CONFLICT, RECORD_EXISTS),
    "SQLITE_CONSTRAINT_PRIMARYKEY": (status.HTTP_409_CONFLICT, RECORD_EXISTS),
    "SQLITE_CONSTRAINT_FOREIGNKEY": (status.HTTP_400_BAD_REQUEST, INVALID_REFERENCE),
    "SQLITE_CONSTRAINT_CHECK": (status.HTTP_400_BAD_REQUEST, INVALID_DATA),
    "SQLITE_CONSTRAINT_NOTNULL": (status.HTTP_400_BAD_REQUEST, INVALID_DATA),
    "SQLITE_MISMATCH": (status.HTTP_400_BAD_REQUEST, INVALID_DATA),
}


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _is_production(request: Request) -> bool:
    config = getattr(request.app.state, "config", None)
    return config is not None and config.server.is_production


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and "endpoint" not in request.scope:
        return _error(exc.status_code, f"Route {request.method} {request.url.path} not found")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field as ``"<field>: <message>"``."""
    first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
    field = ".".join(str(part) for part in first["loc"] if part not in ("body", "query", "path"))
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def database_error_handler(request: Request, exc: IntegrityError | DataError) -> JSONResponse:
    code = getattr(exc.orig, "sqlite_errorname", "")
    mapped = _CONSTRAINT_ERRORS.get(code)
    if mapped is None:
        return await unhandled_error_handler(request, exc)
    logger.info("api.constraint_violation", code=code, path=request.url.path)
    return _error(*mapped)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "api.unhandled_error", path=request.url.path, method=request.method, exc_info=exc
    )
    message = str(exc) or "Internal server error"
    if _is_production(request):
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, stack=stack)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, database_error_handler)
    app.add_exception_handler(DataError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
