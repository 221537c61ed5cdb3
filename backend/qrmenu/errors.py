# Overview: Error taxonomy translated to JSON responses at the HTTP boundary.

"""
API errors.

Services raise these; the handler registered in create_app() turns them into
{status, type, message} bodies. Nothing here touches the database.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that are answered, not crashed on."""

    status_code = 500
    error_type = "internal_error"
    default_message = "An internal error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "status": self.status_code,
            "type": self.error_type,
            "message": self.message,
        }


class AuthenticationFailed(ApiError):
    """Bad, missing, expired or wrong-type token; unknown or inactive user."""

    status_code = 401
    error_type = "unauthorized"
    default_message = "Authentication required."


class AccessDenied(ApiError):
    """A capability voter said no."""

    status_code = 403
    error_type = "forbidden"
    default_message = "Access denied."


class InvalidStatusTransition(ApiError):
    """Illegal product workflow move (the action is allowed, the state is not)."""

    status_code = 400
    error_type = "bad_request"

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f'Cannot transition product status from "{_value(from_status)}" '
            f'to "{_value(to_status)}".'
        )


class EntityNotFound(ApiError):
    """
    Missing entity.

    Also raised for entities owned by another tenant, with the same message,
    so a caller cannot tell the two cases apart.
    """

    status_code = 404
    error_type = "not_found"

    def __init__(self, entity_name: str, identifier):
        super().__init__(f'{entity_name} with identifier "{identifier}" not found.')


class ValidationError(ApiError):
    """422-level input problem."""

    status_code = 422
    error_type = "validation_error"
    default_message = "Validation failed."

    def __init__(self, errors: list[dict] | None = None, message: str | None = None):
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(ApiError):
    """409-level business rule conflict (e.g., duplicate slug)."""

    status_code = 409
    error_type = "conflict"
    default_message = "Resource conflict."


def _value(status) -> str:
    return getattr(status, "value", status)
