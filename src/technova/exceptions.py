"""Errors raised by the record service and rendered by the API."""


class RecordServiceError(Exception):
    """Base error carrying a caller-safe message and an HTTP status."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(RecordServiceError):
    status_code = 404
    default_message = "User not found"


class ConflictError(RecordServiceError):
    status_code = 400
    default_message = "Email already registered"


class InternalError(RecordServiceError):
    """Persistence failure; the detail stays in the server log."""

    status_code = 500
    default_message = "Server error"
