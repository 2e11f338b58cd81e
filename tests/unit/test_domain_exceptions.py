"""Tests for domain exceptions (error_code, message, details) and HTTP status mapping."""

import pytest

from app.core.exception_handlers import status_for
from app.domain.exceptions import (
    AdConnectException,
    AuthenticationRequired,
    ConnectionDisabled,
    ConsentRequired,
    CredentialsInvalid,
    CredentialsNotFound,
    DatabaseNotConfigured,
    DecryptionError,
    Forbidden,
    InvalidState,
    NotFound,
    ProviderGrantRevoked,
    ProviderRequestError,
    ReauthorizationRequired,
    TransientProviderError,
    TransientRefreshFailure,
    Unauthenticated,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base AdConnectException uses class name as error_code when not provided."""
    exc = AdConnectException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AdConnectException"
    assert exc.details == {}
    assert exc.to_dict() == {"error": "AdConnectException", "message": "Something failed"}


def test_base_exception_custom_error_code_and_details() -> None:
    exc = AdConnectException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("client_id is required", field="client_id")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "client_id"}


def test_forbidden_names_action_and_role() -> None:
    exc = Forbidden("save_app_credentials")
    assert exc.message == "Only users with the admin role may save app credentials"
    assert exc.details == {"action": "save_app_credentials", "required_role": "admin"}


def test_connection_disabled_names_provider() -> None:
    exc = ConnectionDisabled("linkedin")
    assert exc.error_code == "CONNECTION_DISABLED"
    assert exc.details == {"provider": "linkedin"}


def test_authentication_required_carries_authorization_url() -> None:
    exc = AuthenticationRequired("google_ads", authorization_url="https://consent")
    assert exc.authorization_url == "https://consent"
    assert exc.to_dict()["details"] == {
        "provider": "google_ads",
        "authorization_url": "https://consent",
    }


def test_authentication_required_without_url() -> None:
    exc = AuthenticationRequired("linkedin")
    assert "authorization_url" not in exc.details
    assert "connect linkedin first" in exc.message


def test_reauthorization_required_reason() -> None:
    exc = ReauthorizationRequired("linkedin_page", reason="invalid_grant")
    assert exc.error_code == "REAUTHORIZATION_REQUIRED"
    assert exc.details == {"provider": "linkedin_page", "reason": "invalid_grant"}


def test_transient_refresh_failure_copies_retry_hint() -> None:
    cause = TransientProviderError("google_ads", "rate limited", status_code=429, retry_after=7)
    exc = TransientRefreshFailure("google_ads", cause)
    assert isinstance(exc, TransientProviderError)
    assert exc.error_code == "TRANSIENT_REFRESH_FAILURE"
    assert exc.retry_after == 7
    assert exc.details["status_code"] == 429


def test_not_found_with_and_without_id() -> None:
    assert NotFound("staged_selection").message == "staged_selection not found"
    exc = NotFound("managed_account", "111")
    assert exc.message == "managed_account not found: 111"
    assert exc.details == {"resource_type": "managed_account", "resource_id": "111"}


def test_provider_grant_revoked_is_provider_exception() -> None:
    exc = ProviderGrantRevoked("google_ads", "invalid_grant", "Token has been revoked.")
    assert exc.provider_error == "invalid_grant"
    assert exc.description == "Token has been revoked."


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ValidationException("bad"), 400),
        (Unauthenticated(), 401),
        (Forbidden("x"), 403),
        (ConnectionDisabled("linkedin"), 403),
        (AuthenticationRequired("google_ads"), 401),
        (ReauthorizationRequired("google_ads"), 401),
        (InvalidState(), 400),
        (ConsentRequired("google_ads"), 400),
        (NotFound("managed_account"), 404),
        (CredentialsNotFound("google_ads"), 404),
        (CredentialsInvalid("google_ads", "empty"), 500),
        (DecryptionError(), 500),
        (TransientProviderError("google_ads", "down"), 503),
        (TransientRefreshFailure("google_ads"), 503),
        (ProviderRequestError("google_ads", 400, "search"), 502),
        (DatabaseNotConfigured(), 503),
        (AdConnectException("unmapped"), 400),
    ],
)
def test_status_for(exc: AdConnectException, status: int) -> None:
    assert status_for(exc) == status
