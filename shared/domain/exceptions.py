"""
Engine Error Taxonomy

Every error the booking engine raises on purpose derives from
``EngineError`` and carries a stable machine-readable ``code`` plus the
HTTP status the API layer renders it with. Infrastructure failures
(database, programming errors) are *not* EngineErrors.
"""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for expected, user-presentable engine failures."""

    code = "engine_error"
    http_status = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "detail": self.message}
        payload.update(self.extra)
        return payload


class ValidationError(EngineError):
    """Malformed input, rejected before any state mutation."""

    code = "validation_error"
    http_status = 400
    default_message = "Invalid input."

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None):
        super().__init__(message, errors=errors or {})

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.extra["errors"]


class NotFound(EngineError):
    code = "not_found"
    http_status = 404
    default_message = "Resource not found."


class Unauthorized(EngineError):
    """Caller is not a party to the booking or lacks the required role."""

    code = "unauthorized"
    http_status = 403
    default_message = "You are not allowed to perform this action."


class InvalidState(EngineError):
    """The requested transition is not legal from the current status."""

    code = "invalid_state"
    http_status = 409

    def __init__(self, current: str, requested: str, message: str | None = None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Cannot {requested} a booking in status '{current}'.",
        )
        self.extra.update(current=current, requested=requested)


class ConflictError(InvalidState):
    """A concurrent writer changed the status between read and guarded write."""

    code = "conflict"

    def __init__(self, current: str, requested: str, message: str | None = None):
        super().__init__(
            current,
            requested,
            message or f"Booking changed concurrently (now '{current}'); '{requested}' was not applied.",
        )


class Expired(InvalidState):
    """The 15-minute request window elapsed before the companion accepted."""

    code = "expired"

    def __init__(self, requested: str = "accept", message: str | None = None):
        super().__init__("expired", requested, message or "Booking request has expired.")


class GatewayError(EngineError):
    """Payment gateway call failed, timed out or returned an unusable answer."""

    code = "gateway_error"
    http_status = 502
    default_message = "Payment gateway request failed."
