"""Error taxonomy shared by the transport, services and state containers."""

from __future__ import annotations

from typing import Optional


class CourseMasterError(Exception):
    """Base class for all client errors."""


class InputError(CourseMasterError, ValueError):
    """Local validation failure caught before any request is sent."""


class ConfigurationError(CourseMasterError):
    """Settings could not be read or failed validation."""


class SessionStateError(CourseMasterError):
    """An operation was invoked in a quiz phase that does not allow it."""


class ApiError(CourseMasterError):
    """Remote failure carrying the server message (or a generic fallback)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class NotFoundError(ApiError):
    """HTTP 404. Callers use it to mean "nothing recorded yet", not a failure."""


def describe_error(exc: BaseException, fallback: str) -> str:
    """Return a human-readable banner message for `exc`."""
    message = str(exc).strip()
    return message or fallback
