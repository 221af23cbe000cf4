"""Bind request input onto pydantic models and report failures as messages.

A model declares a custom client-facing message for a field through the
``error`` key of the field's ``json_schema_extra``::

    class SignupForm(BaseModel):
        email: str = error_field("Please provide a valid email address", min_length=3)
        nickname: str = Field(min_length=2)

When ``email`` fails validation the custom message is reported; ``nickname``
has no override and reports the validator's own message.
"""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
import json
import logging
import types
from typing import Annotated
from typing import Any
from typing import Generic
from typing import TypeVar
from typing import Union
from typing import get_args
from typing import get_origin

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic_core import PydanticUndefined
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from webbase.core.errors import BindingError
from webbase.core.errors import ValidatorFault
from webbase.core.responses import serve_validation_error
from webbase.core.responses import serve_validation_errors
from webbase.schemas.message import ValidationFailure

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ERROR_OVERRIDE_KEY = "error"
ROOT_FIELD = "__root__"
_SEQUENCE_ORIGINS = (list, set, frozenset, tuple)
_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass(frozen=True)
class ValidationOutcome(Generic[ModelT]):
    """Result of binding and validating one request.

    Truthy when the input was valid. Otherwise ``response`` holds the
    validation error response the endpoint should return unchanged.
    """

    value: ModelT | None = None
    response: JSONResponse | None = None

    def __bool__(self) -> bool:
        return self.response is None


def error_field(message: str, default: Any = PydanticUndefined, **kwargs: Any) -> Any:
    """Declare a model field carrying a custom validation message."""
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[ERROR_OVERRIDE_KEY] = message
    return Field(default, json_schema_extra=extra, **kwargs)


def _is_sequence(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is Annotated or origin is Union or origin is types.UnionType:
        return any(_is_sequence(arg) for arg in get_args(annotation))
    return origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS


def _sequence_keys(model: type[BaseModel] | None) -> set[str]:
    if model is None:
        return set()
    keys: set[str] = set()
    for name, field in model.model_fields.items():
        if _is_sequence(field.annotation):
            keys.add(name)
            if field.alias:
                keys.add(field.alias)
    return keys


def bind(raw_input: Any, model: type[BaseModel] | None = None) -> dict[str, Any]:
    """Turn raw request input into a plain dict ready for validation.

    Multi-value mappings (query strings, form bodies) keep every value of a
    repeated key as a list. Keys mapped to sequence fields of ``model`` are
    always lists, even when only one value was sent.
    """
    if isinstance(raw_input, (str, bytes, bytearray)):
        try:
            decoded = json.loads(raw_input)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise BindingError(f"Request body is not valid JSON: {exc}") from exc
        if not isinstance(decoded, dict):
            raise BindingError("Request body must be a JSON object")
        return decoded

    if not isinstance(raw_input, Mapping):
        raise BindingError(f"Cannot bind input of type {type(raw_input).__name__}")

    if not hasattr(raw_input, "getlist"):
        return dict(raw_input)

    sequence_keys = _sequence_keys(model)
    bound: dict[str, Any] = {}
    for key in raw_input.keys():
        values = raw_input.getlist(key)
        if key in sequence_keys or len(values) > 1:
            bound[key] = list(values)
        else:
            bound[key] = values[0]
    return bound


def field_overrides(model: type[BaseModel]) -> dict[str, str]:
    """Map each declared field, in declaration order, to its custom message.

    Fields without an override map to an empty string. A field's alias maps
    to the same message as its name.
    """
    overrides: dict[str, str] = {}
    for name, field in model.model_fields.items():
        extra = field.json_schema_extra
        message = extra.get(ERROR_OVERRIDE_KEY, "") if isinstance(extra, dict) else ""
        overrides[name] = str(message or "")
        if field.alias and field.alias != name:
            overrides[field.alias] = overrides[name]
    return overrides


def collect_failures(exc: ValidationError) -> list[ValidationFailure]:
    """Convert a pydantic error into failures, keeping the validator's order."""
    failures: list[ValidationFailure] = []
    for issue in exc.errors():
        location = issue.get("loc", ())
        field = str(location[0]) if location else ROOT_FIELD
        failures.append(ValidationFailure(field=field, message=str(issue.get("msg", ""))))
    return failures


def resolve_messages(failures: Sequence[ValidationFailure], overrides: Mapping[str, str]) -> list[str]:
    """Pick the override for each failure when one is set, else the validator message."""
    return [overrides.get(failure.field) or failure.message for failure in failures]


def _run_validator(model: type[ModelT], bound: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(bound)
    except ValidationError:
        raise
    except Exception as exc:
        raise ValidatorFault(f"Validator failed for {model.__name__}: {exc}") from exc


def _validate_bound(bound: dict[str, Any], model: type[ModelT]) -> ValidationOutcome[ModelT]:
    try:
        value = _run_validator(model, bound)
    except ValidatorFault:
        logger.exception("Validator fault while checking %s", model.__name__)
        return ValidationOutcome(response=serve_validation_error())
    except ValidationError as exc:
        messages = resolve_messages(collect_failures(exc), field_overrides(model))
        return ValidationOutcome(response=serve_validation_errors(messages))

    return ValidationOutcome(value=value)


def parse_and_validate(raw_input: Any, model: type[ModelT]) -> ValidationOutcome[ModelT]:
    """Bind ``raw_input`` onto ``model`` and validate it.

    Input that cannot be bound, and validators that crash, both short-circuit
    with the generic validation message. Field failures are reported one
    message per failure, in the order the validator reported them.
    """
    try:
        bound = bind(raw_input, model)
    except BindingError as exc:
        logger.info("Binding failed for %s: %s", model.__name__, exc)
        return ValidationOutcome(response=serve_validation_error())

    return _validate_bound(bound, model)


async def validate_request(request: Request, model: type[ModelT]) -> ValidationOutcome[ModelT]:
    """Validate the query parameters and body of ``request`` against ``model``.

    Body values win over query values with the same key.
    """
    try:
        bound = bind(request.query_params, model)
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(_FORM_CONTENT_TYPES):
            bound.update(bind(await request.form(), model))
        else:
            body = await request.body()
            if body.strip():
                bound.update(bind(body, model))
    except (BindingError, StarletteHTTPException, ClientDisconnect) as exc:
        logger.info("Binding failed for %s: %s", model.__name__, exc)
        return ValidationOutcome(response=serve_validation_error())

    return _validate_bound(bound, model)
