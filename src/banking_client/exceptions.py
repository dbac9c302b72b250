"""Exception hierarchy for the banking client.

Transport failures and HTTP error statuses are mapped onto a small set of
exception types so that callers can branch on the category instead of on
raw status codes:

- TransportError: the request never produced a response (timeout, refused).
- AuthenticationError: 401 on a request that carried no session (bad login).
- SessionExpiredError: 401 on an authenticated request; the stored session
  has already been cleared.
- PermissionDeniedError: 403, shown inline without leaving the page.
- NotFoundError: 404.
- RequestValidationError: 400/409/422 with the server's field details.
- ServerError: 5xx.
"""

from typing import Any

import requests


class BankingClientError(Exception):
    """Base exception for all banking client errors."""


class TransportError(BankingClientError):
    """Raised when the backend could not be reached."""


class FormValidationError(BankingClientError):
    """Raised when user input is rejected before any request is sent."""


class ApiError(BankingClientError):
    """Raised when the backend answers with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiError":
        """Build the matching ApiError subclass for an error response."""
        message, details = _extract_error_payload(response)
        error_cls = _error_class_for_status(response.status_code)
        return error_cls(message, status_code=response.status_code, details=details)


class AuthenticationError(ApiError):
    """Raised on 401 when no session token was sent, e.g. wrong credentials."""


class SessionExpiredError(AuthenticationError):
    """Raised on 401 after the stored session was cleared."""


class PermissionDeniedError(ApiError):
    """Raised on 403."""


class NotFoundError(ApiError):
    """Raised on 404."""


class RequestValidationError(ApiError):
    """Raised when the backend rejects the request payload."""


class ServerError(ApiError):
    """Raised on 5xx responses."""


def _error_class_for_status(status_code: int) -> type[ApiError]:
    if status_code == 401:
        return AuthenticationError
    if status_code == 403:
        return PermissionDeniedError
    if status_code == 404:
        return NotFoundError
    if status_code in (400, 409, 422):
        return RequestValidationError
    if status_code >= 500:
        return ServerError
    return ApiError


def _extract_error_payload(
    response: requests.Response,
) -> tuple[str, dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        details = payload.get("details")
        if not isinstance(details, dict):
            details = {}
        if message:
            return str(message), details
        if details:
            return "; ".join(f"{k}: {v}" for k, v in details.items()), details

    text = (response.text or "").strip()
    if text:
        return text, {}
    return f"HTTP {response.status_code} {response.reason or ''}".strip(), {}
