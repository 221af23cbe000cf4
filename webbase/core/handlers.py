"""Exception handler registration for FastAPI applications."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webbase.core.errors import APP_ERROR_MSG
from webbase.core.errors import AppError
from webbase.core.errors import VALIDATION_ERROR_MSG
from webbase.core.responses import serve_app_error
from webbase.core.responses import serve_error
from webbase.core.responses import serve_message_with_status
from webbase.core.responses import serve_validation_errors

logger = logging.getLogger(__name__)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    """Return application errors in the shared message envelope."""

    return serve_error(exc)


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the message envelope."""

    messages = [str(issue.get("msg", VALIDATION_ERROR_MSG)) for issue in exc.errors()]
    return serve_validation_errors(messages or [VALIDATION_ERROR_MSG])


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep the status of framework HTTP errors but use the message envelope."""

    message = exc.detail if isinstance(exc.detail, str) and exc.detail else APP_ERROR_MSG
    response = serve_message_with_status(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and answer with the generic application error."""

    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return serve_app_error()


def register_error_handlers(app: FastAPI) -> None:
    """Attach all webbase error handlers to a FastAPI app instance."""

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
