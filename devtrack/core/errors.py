# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain error taxonomy.

Services raise these; the exception handlers in ``main.py`` turn them into
``{"error": <code>, "message": <text>}`` responses with ``status_code``.
"""


class DevTrackError(Exception):
    """Base class for every error a caller is allowed to see."""

    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DevTrackError):
    """Malformed or missing field, invalid enum value."""

    status_code = 400
    error = "validation_error"


class ConflictError(ValidationError):
    """The requested state already holds (e.g. member already on the team)."""

    error = "conflict"


class InvalidOperationError(ValidationError):
    """Well-formed request that would break an invariant."""

    error = "invalid_operation"


class AuthenticationError(DevTrackError):
    status_code = 401
    error = "authentication_error"


class AuthorizationError(DevTrackError):
    status_code = 403
    error = "authorization_error"


class NotFoundError(DevTrackError):
    status_code = 404
    error = "not_found"


class InternalError(DevTrackError):
    status_code = 500
    error = "internal_error"
