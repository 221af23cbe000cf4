"""Error taxonomy, status codes and fixed client-facing messages."""

from __future__ import annotations

APP_ERROR_CODE = 500
VALIDATION_ERROR_CODE = 400
UNAUTHORIZED_ERROR_CODE = 401

APP_ERROR_MSG = "An application error has occurred"
VALIDATION_ERROR_MSG = "Validation error"
UNAUTHORIZED_ERROR_MSG = "Unauthorized access"


class AppError(Exception):
    """Recoverable application failure carrying an optional status code.

    A code of 0 means the caller did not choose one; the response layer then
    falls back to ``APP_ERROR_CODE``.
    """

    def __init__(self, message: str, code: int = 0) -> None:
        super().__init__(message)
        self._message = message
        self._code = code

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> int:
        return self._code

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self._message!r}, code={self._code})"


class UnauthorizedError(AppError):
    """Convenience error for requests lacking valid credentials."""

    def __init__(self, message: str = UNAUTHORIZED_ERROR_MSG) -> None:
        super().__init__(message, code=UNAUTHORIZED_ERROR_CODE)


class BindingError(ValueError):
    """Raised when request input cannot be bound onto a target model."""


class ValidatorFault(RuntimeError):
    """Raised when the validator itself fails rather than reporting a result."""


class RuntimeFault(RuntimeError):
    """Unexpected exception intercepted at a request-handling boundary."""

    def __init__(self, *, identifier: str, operation: str, detail: str) -> None:
        super().__init__(f"{operation}[{identifier}]: {detail}")
        self.identifier = identifier
        self.operation = operation
        self.detail = detail


class TranslationLoadError(RuntimeError):
    """Raised when a translation document or record cannot be loaded."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class InvalidLocaleError(TranslationLoadError):
    """Raised when a locale tag cannot be parsed."""
