"""Tests for domain value objects and enums."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.enums import PlatformName, PrincipalType, ProviderName, UserRole
from app.domain.value_objects import CallerIdentity, Principal, TokenSet

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def test_organization_principal_has_empty_subject_key() -> None:
    principal = Principal.organization()
    assert principal.subject_id is None
    assert principal.subject_key == ""


def test_user_principal_requires_subject() -> None:
    assert Principal.user("u1").subject_key == "u1"
    with pytest.raises(ValueError):
        Principal(PrincipalType.USER)
    with pytest.raises(ValueError):
        Principal(PrincipalType.ORGANIZATION, "u1")


def test_principals_compare_by_value() -> None:
    assert Principal.user("u1") == Principal.user("u1")
    assert Principal.user("u1") != Principal.user("u2")
    assert len({Principal.organization(), Principal.organization()}) == 1


def test_token_set_expiry_boundary() -> None:
    token_set = TokenSet(access_token="at", expires_at=NOW)
    assert not token_set.is_expired(NOW - timedelta(seconds=1))
    assert token_set.is_expired(NOW)
    assert token_set.is_expired(NOW - timedelta(seconds=30), skew_seconds=30)


def test_token_set_requires_access_token() -> None:
    with pytest.raises(ValueError):
        TokenSet(access_token="", expires_at=NOW)


def test_token_set_repr_hides_secrets() -> None:
    text = repr(TokenSet(access_token="secret-at", refresh_token="secret-rt", expires_at=NOW))
    assert "secret-at" not in text
    assert "secret-rt" not in text


def test_with_refresh_token_returns_copy() -> None:
    original = TokenSet(access_token="at", expires_at=NOW)
    updated = original.with_refresh_token("rt")
    assert original.refresh_token is None
    assert updated.refresh_token == "rt"


def test_caller_identity_admin_flag() -> None:
    assert CallerIdentity("u", UserRole.ADMIN).is_admin
    assert not CallerIdentity("u", UserRole.MEMBER).is_admin


@pytest.mark.parametrize(
    ("provider", "platform", "principal_type"),
    [
        (ProviderName.GOOGLE_ADS, PlatformName.GOOGLE_ADS, PrincipalType.ORGANIZATION),
        (ProviderName.LINKEDIN, PlatformName.LINKEDIN, PrincipalType.USER),
        (ProviderName.LINKEDIN_PAGE, PlatformName.LINKEDIN, PrincipalType.ORGANIZATION),
    ],
)
def test_provider_platform_and_principal(provider, platform, principal_type) -> None:
    assert provider.platform is platform
    assert provider.principal_type is principal_type


def test_enum_values() -> None:
    assert ProviderName.values() == ["google_ads", "linkedin", "linkedin_page"]
    assert UserRole.values() == ["admin", "member"]
