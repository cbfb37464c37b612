"""
Domain errors raised by the downtime store and services.

Each error carries a human-readable message and the HTTP status the transport
layer should answer with. Storage-engine details never end up in a message.
"""


class DowntimeError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DowntimeError):
    """Missing or out-of-range input."""

    status_code = 400


class NotFoundError(DowntimeError):
    """Missing downtime window or missing referenced system."""

    status_code = 404


class InternalError(DowntimeError):
    """Unexpected storage failure."""

    status_code = 500
