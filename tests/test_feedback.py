"""Tests for user-facing error messages."""

import pytest

from banking_client.exceptions import (
    ApiError,
    AuthenticationError,
    FormValidationError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
    ServerError,
    SessionExpiredError,
    TransportError,
)
from ui.feedback import (
    PERMISSION_DENIED,
    SERVICE_UNREACHABLE,
    SESSION_EXPIRED,
    error_message,
)


class TestErrorMessage:
    """Tests for error_message."""

    def test_forbidden_uses_permission_message(self):
        error = PermissionDeniedError("Access is denied", status_code=403)
        assert error_message(error, "fallback") == PERMISSION_DENIED

    def test_expired_session(self):
        error = SessionExpiredError("JWT expired", status_code=401)
        assert error_message(error, "fallback") == SESSION_EXPIRED

    def test_bad_credentials_show_server_message(self):
        error = AuthenticationError("Invalid username or password", status_code=401)
        assert error_message(error, "fallback") == "Invalid username or password"

    @pytest.mark.parametrize(
        "error_cls,status", [(RequestValidationError, 400), (NotFoundError, 404)]
    )
    def test_server_message_is_kept(self, error_cls, status):
        error = error_cls("Insufficient funds", status_code=status)
        assert error_message(error, "fallback") == "Insufficient funds"

    def test_empty_server_message_uses_fallback(self):
        error = RequestValidationError("", status_code=400)
        assert error_message(error, "fallback") == "fallback"

    def test_form_validation(self):
        error = FormValidationError("amount must be greater than zero")
        assert error_message(error) == "amount must be greater than zero"

    def test_unreachable(self):
        assert error_message(TransportError("refused")) == SERVICE_UNREACHABLE

    @pytest.mark.parametrize(
        "error",
        [ServerError("stack trace", status_code=500), ApiError("teapot", 418)],
    )
    def test_other_errors_use_fallback(self, error):
        assert error_message(error, "Failed to load accounts.") == (
            "Failed to load accounts."
        )
