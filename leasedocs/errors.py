"""Error taxonomy shared by services, the HTTP API and the CLI"""

from typing import Optional


class LeasedocsError(Exception):
    """Base class for all recoverable pipeline errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LeasedocsError):
    """A required field is missing or malformed."""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidStateError(LeasedocsError):
    """Action attempted against a document in an incompatible status."""

    status_code = 409


class NotFoundError(LeasedocsError):
    """Referenced template, document or file no longer exists."""

    status_code = 404


class AuthError(LeasedocsError):
    """Missing or unknown credential."""

    status_code = 401


class TransportError(LeasedocsError):
    """Network or API failure seen by the HTTP client."""

    status_code = 502
    GENERIC_MESSAGE = "Request failed. Please try again."

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message or self.GENERIC_MESSAGE)
        self.status = status
