"""Domain exception → HTTP response mapping.

Services raise EadError subclasses and know nothing about HTTP.  One table
here decides the status for each error code; the body is always
``{"error": code, "detail": message, **details}``.

Storage failures are logged with their traceback and answered with a
generic body: connection strings and SQL never reach the client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from ead_service.core.errors import (
    AccessExpired,
    CodeGenerationFailed,
    EadError,
    EnrollmentNotFound,
    IncompleteProgress,
    InvalidCourse,
    InvalidDuration,
    InvalidTarget,
    LessonNotFound,
    NotFound,
    ProfileMissing,
    StoreUnavailable,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[EadError], int] = {
    Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ProfileMissing: status.HTTP_403_FORBIDDEN,
    InvalidCourse: status.HTTP_400_BAD_REQUEST,
    InvalidDuration: status.HTTP_400_BAD_REQUEST,
    InvalidTarget: status.HTTP_400_BAD_REQUEST,
    EnrollmentNotFound: status.HTTP_404_NOT_FOUND,
    LessonNotFound: status.HTTP_404_NOT_FOUND,
    IncompleteProgress: status.HTTP_400_BAD_REQUEST,
    AccessExpired: status.HTTP_403_FORBIDDEN,
    CodeGenerationFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
    NotFound: status.HTTP_404_NOT_FOUND,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: EadError) -> int:
    return STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_body(exc: EadError) -> dict[str, object]:
    return {"error": exc.code, "detail": str(exc), **exc.details()}


async def _handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, EadError)
    code = status_for(exc)
    headers = None
    if code >= 500:
        logger.exception("Request failed: %s %s", request.method, request.url.path, exc_info=exc)
    else:
        logger.info("Request rejected: %s", exc.code, extra={"status_code": code})
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=code, content=error_body(exc), headers=headers)


async def _handle_store_down(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_body(StoreUnavailable()),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EadError, _handle_domain_error)
    app.add_exception_handler(OperationalError, _handle_store_down)
    app.add_exception_handler(InterfaceError, _handle_store_down)
    app.add_exception_handler(Exception, _handle_unexpected)
