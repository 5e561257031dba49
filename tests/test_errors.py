"""Tests for the error taxonomy and user-facing messages."""

from authhub.errors import (
    AuthErrorCode,
    AuthHubError,
    ConfigurationError,
    MethodUnavailableError,
    MissingCodeError,
    OAuthCallbackError,
    OAuthError,
    ProviderError,
    StorageError,
    UnknownProviderError,
    ValidationError,
    provider_error_from_code,
    user_message,
)
from authhub.models import AuthMethod


class TestTaxonomy:
    """Tests for the exception hierarchy."""

    def test_everything_is_an_authhub_error(self) -> None:
        for exc in (
            ProviderError("x"),
            ValidationError("x"),
            StorageError("x"),
            ConfigurationError("x"),
            MethodUnavailableError(AuthMethod.SLACK),
            OAuthError("denied"),
        ):
            assert isinstance(exc, AuthHubError)

    def test_callback_errors_are_validation_errors(self) -> None:
        for exc in (OAuthError("x"), MissingCodeError(), UnknownProviderError("s")):
            assert isinstance(exc, OAuthCallbackError)
            assert isinstance(exc, ValidationError)

    def test_method_unavailable_details(self) -> None:
        exc = MethodUnavailableError(AuthMethod.TEAMS)
        assert str(exc) == "Authentication method not available: teams"
        assert exc.details == {"method": "teams"}

    def test_callback_error_keeps_uri(self) -> None:
        exc = MissingCodeError(uri="app://cb")
        assert exc.uri == "app://cb"
        assert exc.details == {"uri": "app://cb"}


class TestProviderErrorFromCode:
    """Tests for backend code mapping."""

    def test_known_code(self) -> None:
        exc = provider_error_from_code("wrong-password", method=AuthMethod.EMAIL)
        assert exc.code is AuthErrorCode.INVALID_CREDENTIALS
        assert exc.message == "Incorrect password."
        assert exc.backend_code == "wrong-password"
        assert exc.method is AuthMethod.EMAIL

    def test_unknown_code_uses_backend_message(self) -> None:
        exc = provider_error_from_code("quota-exceeded", "Daily SMS quota exceeded")
        assert exc.code is AuthErrorCode.UNKNOWN
        assert exc.message == "Daily SMS quota exceeded"

    def test_unknown_code_without_message(self) -> None:
        exc = provider_error_from_code("mystery")
        assert exc.message == "An unknown authentication error occurred."


class TestUserMessage:
    """Tests for user_message."""

    def test_oauth_failures_are_generic(self) -> None:
        assert user_message(OAuthError("invalid_scope")) == "Authentication failed."
        assert user_message(UnknownProviderError("x_1")) == "Authentication failed."

    def test_provider_error_message_passes_through(self) -> None:
        exc = provider_error_from_code("user-disabled")
        assert user_message(exc) == "This user account has been disabled."

    def test_unexpected_errors_are_hidden(self) -> None:
        assert user_message(KeyError("internal_field")) == (
            "An internal error occurred. Please try again later."
        )
