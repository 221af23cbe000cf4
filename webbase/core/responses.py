"""Response helpers producing the JSON body and status of every request outcome.

Each ``serve_*`` function returns exactly one response. Returning it from an
endpoint ends the request; nothing else should be written afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sequence
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status

from webbase.core.errors import APP_ERROR_CODE
from webbase.core.errors import APP_ERROR_MSG
from webbase.core.errors import AppError
from webbase.core.errors import UNAUTHORIZED_ERROR_CODE
from webbase.core.errors import UNAUTHORIZED_ERROR_MSG
from webbase.core.errors import VALIDATION_ERROR_CODE
from webbase.core.errors import VALIDATION_ERROR_MSG
from webbase.schemas.message import MessageResponse
from webbase.schemas.message import ValidationFailure

logger = logging.getLogger(__name__)

CACHE_CONTROL_HEADER = "Cache-control"


def cache_control_value(seconds: int) -> str:
    return f"private, must-revalidate, max-age={seconds}"


def serve_json(payload: Any, cache_seconds: int = 0) -> JSONResponse:
    """Serve an arbitrary payload as JSON, optionally marking it cacheable."""
    headers = None
    if cache_seconds > 0:
        headers = {CACHE_CONTROL_HEADER: cache_control_value(cache_seconds)}
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(payload), headers=headers)


def serve_json_model(payload: Any) -> JSONResponse:
    return serve_json(payload, 0)


def serve_blank_model() -> JSONResponse:
    return serve_json({})


def serve_blank_model_list() -> JSONResponse:
    return serve_json([])


def serve_messages_with_status(status_code: int, messages: Iterable[str]) -> JSONResponse:
    """Serve a status code with the messages wrapped in the shared envelope."""
    envelope = MessageResponse(messages=list(messages))
    return JSONResponse(status_code=status_code, content=envelope.to_wire())


def serve_message_with_status(status_code: int, message: str) -> JSONResponse:
    return serve_messages_with_status(status_code, [message])


def serve_error(err: BaseException) -> JSONResponse:
    """Serve an error value.

    Application errors keep their own code when one was chosen. Any other
    error is reported with ``APP_ERROR_CODE`` and its own text, unlike
    ``serve_app_error`` which always uses the fixed generic message.
    """
    logger.info("Application error, exiting: %s", err)

    if isinstance(err, AppError):
        if err.code != 0:
            return serve_message_with_status(err.code, err.message)
        return serve_message_with_status(APP_ERROR_CODE, err.message)

    return serve_message_with_status(APP_ERROR_CODE, str(err))


def serve_app_error() -> JSONResponse:
    """Serve the generic application error used when no error value is available."""
    logger.info("Application error, exiting")
    return serve_message_with_status(APP_ERROR_CODE, APP_ERROR_MSG)


def serve_unauthorized() -> JSONResponse:
    logger.info("Unauthorized, exiting")
    return serve_message_with_status(UNAUTHORIZED_ERROR_CODE, UNAUTHORIZED_ERROR_MSG)


def serve_validation_error() -> JSONResponse:
    """Serve the generic validation failure used when input could not be checked at all."""
    logger.info("Validation error, exiting")
    return serve_message_with_status(VALIDATION_ERROR_CODE, VALIDATION_ERROR_MSG)


def serve_validation_errors(messages: Sequence[str]) -> JSONResponse:
    logger.info("Validation failed with %d message(s)", len(messages))
    return serve_messages_with_status(VALIDATION_ERROR_CODE, messages)


def serve_field_errors(failures: Iterable[ValidationFailure]) -> JSONResponse:
    """Serve validation failures as ``field: message`` lines."""
    return serve_validation_errors([f"{failure.field}: {failure.message}" for failure in failures])
