"""Error taxonomy surfaced to API callers as ``{"status": "error", "message": ...}``."""

from typing import Optional

from fastapi import status


class TawkError(Exception):
    """Base error carrying the HTTP status used when rendering the envelope."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(TawkError):
    """A required field is missing or malformed."""


class ConflictError(TawkError):
    status_code = status.HTTP_409_CONFLICT


class AuthenticationError(TawkError):
    """Bad credentials, or an invalid/expired OTP or reset token."""


class NotAuthenticatedError(TawkError):
    """The session guard rejected the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class DeliveryError(TawkError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
