"""User-facing messages for client errors.

401 is handled globally (the session is cleared and the portal returns to
the login page); every other error is shown inline by the component that
issued the request.
"""

from banking_client.exceptions import (
    AuthenticationError,
    FormValidationError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
    SessionExpiredError,
    TransportError,
)

PERMISSION_DENIED = "You do not have permission to perform this action."
SESSION_EXPIRED = "Your session has expired. Please log in again."
SERVICE_UNREACHABLE = "The bank service is unreachable. Please try again later."
GENERIC_ERROR = "Something went wrong. Please try again."


def error_message(error: BaseException, fallback: str = GENERIC_ERROR) -> str:
    """Map an error to the text of the inline alert."""
    if isinstance(error, SessionExpiredError):
        return SESSION_EXPIRED
    if isinstance(error, PermissionDeniedError):
        return PERMISSION_DENIED
    if isinstance(error, (AuthenticationError, NotFoundError, RequestValidationError)):
        return error.message or fallback
    if isinstance(error, FormValidationError):
        return str(error) or fallback
    if isinstance(error, TransportError):
        return SERVICE_UNREACHABLE
    return fallback
