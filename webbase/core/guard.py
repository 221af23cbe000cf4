"""Boundary that turns unexpected exceptions into the generic application error."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import functools
import inspect
import logging
from typing import Any
from typing import Generic
from typing import TypeVar
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webbase.core.errors import AppError
from webbase.core.errors import RuntimeFault
from webbase.core.responses import serve_app_error
from webbase.core.responses import serve_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUEST_ID_HEADER = "X-Request-ID"

# Served by the registered handlers with their own status.
FRAMEWORK_EXCEPTIONS = (StarletteHTTPException, RequestValidationError)


@dataclass(frozen=True)
class GuardResult(Generic[T]):
    """Outcome of one guarded unit of work.

    ``response`` is set whenever the work did not return normally. ``fault``
    is only set for unexpected exceptions, never for ``AppError``.
    """

    value: T | None = None
    response: JSONResponse | None = None
    fault: RuntimeFault | None = None

    @property
    def ok(self) -> bool:
        return self.response is None


def _recover(exc: Exception, *, identifier: str, operation: str) -> GuardResult[Any]:
    if isinstance(exc, AppError):
        return GuardResult(response=serve_error(exc))

    logger.exception("Recovered from unexpected exception in %s [%s]", operation, identifier)
    fault = RuntimeFault(identifier=identifier, operation=operation, detail=f"{type(exc).__name__}: {exc}")
    fault.__cause__ = exc
    return GuardResult(response=serve_app_error(), fault=fault)


def run_guarded(work: Callable[[], T], *, identifier: str, operation: str) -> GuardResult[T]:
    """Run ``work`` and convert any exception it raises into a response.

    Framework HTTP and request validation errors are re-raised unchanged.
    """
    try:
        value = work()
    except FRAMEWORK_EXCEPTIONS:
        raise
    except Exception as exc:
        return _recover(exc, identifier=identifier, operation=operation)
    return GuardResult(value=value)


async def run_guarded_async(work: Callable[[], Any], *, identifier: str, operation: str) -> GuardResult[Any]:
    """Awaitable counterpart of ``run_guarded`` for coroutine functions."""
    try:
        value = await work()
    except FRAMEWORK_EXCEPTIONS:
        raise
    except Exception as exc:
        return _recover(exc, identifier=identifier, operation=operation)
    return GuardResult(value=value)


def _request_identifier(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    for candidate in (*args, *kwargs.values()):
        if isinstance(candidate, Request):
            header = candidate.headers.get(REQUEST_ID_HEADER)
            if header:
                return header
    return uuid.uuid4().hex


def catch_panic(operation: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate an endpoint so unexpected exceptions become the generic error response.

    The request id is taken from the ``X-Request-ID`` header when the endpoint
    receives the ``Request``; otherwise a random one is generated for the log.
    """

    def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(endpoint):

            @functools.wraps(endpoint)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                result = await run_guarded_async(
                    lambda: endpoint(*args, **kwargs),
                    identifier=_request_identifier(args, kwargs),
                    operation=operation,
                )
                return result.value if result.ok else result.response

            return async_wrapper

        @functools.wraps(endpoint)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = run_guarded(
                lambda: endpoint(*args, **kwargs),
                identifier=_request_identifier(args, kwargs),
                operation=operation,
            )
            return result.value if result.ok else result.response

        return wrapper

    return decorator
