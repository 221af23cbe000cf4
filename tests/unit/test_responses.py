"""Unit tests for the response helpers and the message envelope."""

from __future__ import annotations

import json

from fastapi.responses import JSONResponse
import pytest

from webbase.core.errors import APP_ERROR_CODE
from webbase.core.errors import APP_ERROR_MSG
from webbase.core.errors import AppError
from webbase.core.errors import UNAUTHORIZED_ERROR_CODE
from webbase.core.errors import UNAUTHORIZED_ERROR_MSG
from webbase.core.errors import UnauthorizedError
from webbase.core.errors import VALIDATION_ERROR_CODE
from webbase.core.errors import VALIDATION_ERROR_MSG
from webbase.core.responses import CACHE_CONTROL_HEADER
from webbase.core.responses import serve_app_error
from webbase.core.responses import serve_blank_model
from webbase.core.responses import serve_blank_model_list
from webbase.core.responses import serve_error
from webbase.core.responses import serve_field_errors
from webbase.core.responses import serve_json
from webbase.core.responses import serve_json_model
from webbase.core.responses import serve_messages_with_status
from webbase.core.responses import serve_unauthorized
from webbase.core.responses import serve_validation_error
from webbase.core.responses import serve_validation_errors
from webbase.schemas.message import MessageResponse
from webbase.schemas.message import ValidationFailure


def _body(response: JSONResponse) -> object:
    return json.loads(response.body)


def test_message_envelope_uses_capitalized_wire_key() -> None:
    envelope = MessageResponse(messages=["first", "second"])

    assert envelope.to_wire() == {"Messages": ["first", "second"]}
    assert MessageResponse.model_validate({"Messages": ["x"]}).messages == ["x"]


@pytest.mark.parametrize("code", [404, 409, 418, 503])
def test_coded_app_error_keeps_its_status_and_message(code: int) -> None:
    response = serve_error(AppError("Pipeline not found", code=code))

    assert response.status_code == code
    assert _body(response) == {"Messages": ["Pipeline not found"]}


def test_uncoded_app_error_uses_default_status() -> None:
    response = serve_error(AppError("Could not save the record"))

    assert response.status_code == APP_ERROR_CODE
    assert _body(response) == {"Messages": ["Could not save the record"]}


def test_other_errors_use_their_own_text_not_the_generic_message() -> None:
    response = serve_error(ValueError("quota exceeded"))
    generic = serve_app_error()

    assert response.status_code == APP_ERROR_CODE
    assert _body(response) == {"Messages": ["quota exceeded"]}
    assert generic.status_code == APP_ERROR_CODE
    assert _body(generic) == {"Messages": [APP_ERROR_MSG]}


def test_serve_error_is_idempotent() -> None:
    err = AppError("Conflict on update", code=409)

    assert serve_error(err).body == serve_error(err).body
    assert serve_error(ValueError("bad")).body == serve_error(ValueError("bad")).body


def test_unauthorized_error_is_a_coded_app_error() -> None:
    response = serve_error(UnauthorizedError())

    assert response.status_code == UNAUTHORIZED_ERROR_CODE
    assert _body(response) == {"Messages": [UNAUTHORIZED_ERROR_MSG]}


def test_serve_unauthorized_uses_fixed_message() -> None:
    response = serve_unauthorized()

    assert response.status_code == UNAUTHORIZED_ERROR_CODE
    assert _body(response) == {"Messages": [UNAUTHORIZED_ERROR_MSG]}


def test_validation_responses() -> None:
    generic = serve_validation_error()
    detailed = serve_validation_errors(["name is required", "age must be positive"])

    assert generic.status_code == VALIDATION_ERROR_CODE
    assert _body(generic) == {"Messages": [VALIDATION_ERROR_MSG]}
    assert detailed.status_code == VALIDATION_ERROR_CODE
    assert _body(detailed) == {"Messages": ["name is required", "age must be positive"]}


def test_field_errors_are_prefixed_with_the_field_name() -> None:
    response = serve_field_errors(
        [
            ValidationFailure(field="email", message="Field required"),
            ValidationFailure(field="age", message="Input should be greater than 0"),
        ]
    )

    assert _body(response) == {"Messages": ["email: Field required", "age: Input should be greater than 0"]}


def test_serve_messages_with_status_wraps_messages() -> None:
    response = serve_messages_with_status(202, ("queued",))

    assert response.status_code == 202
    assert _body(response) == {"Messages": ["queued"]}


def test_serve_json_adds_cache_header_only_when_requested() -> None:
    cached = serve_json({"items": [1, 2]}, 60)
    uncached = serve_json_model({"items": [1, 2]})

    assert cached.status_code == 200
    assert _body(cached) == {"items": [1, 2]}
    assert cached.headers[CACHE_CONTROL_HEADER] == "private, must-revalidate, max-age=60"
    assert CACHE_CONTROL_HEADER not in uncached.headers


def test_serve_json_passes_payload_through_untouched() -> None:
    payload = [{"id": 1}, "text", None, 3.5]

    assert _body(serve_json(payload, 0)) == payload
    assert CACHE_CONTROL_HEADER not in serve_json(payload, -5).headers


def test_blank_models() -> None:
    assert _body(serve_blank_model()) == {}
    assert _body(serve_blank_model_list()) == []
