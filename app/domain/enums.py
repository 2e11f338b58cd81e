"""Domain enumerations for platform connections.

Enums represent fixed sets of domain values (providers, principals, roles,
connection and credential status).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class PlatformName(_ValuesMixin, str, Enum):
    """External platform an organization integrates with (one Platform row each)."""

    GOOGLE_ADS = "google_ads"
    LINKEDIN = "linkedin"


class PrincipalType(_ValuesMixin, str, Enum):
    """Scope of a runtime credential.

    ORGANIZATION grants are shared by the whole organization (subject_id is None);
    USER grants belong to one signed-in user (subject_id is the user id).
    """

    ORGANIZATION = "organization"
    USER = "user"


class ProviderName(_ValuesMixin, str, Enum):
    """Provider adapter tag used for dispatch.

    LinkedIn exposes two OAuth integrations on the same platform: per-user
    profile sign-in and organization page administration.
    """

    GOOGLE_ADS = "google_ads"
    LINKEDIN = "linkedin"
    LINKEDIN_PAGE = "linkedin_page"

    @property
    def platform(self) -> PlatformName:
        """Platform row (and app-credential set) this provider belongs to."""
        if self is ProviderName.GOOGLE_ADS:
            return PlatformName.GOOGLE_ADS
        return PlatformName.LINKEDIN

    @property
    def principal_type(self) -> PrincipalType:
        """Principal the runtime credential for this provider is stored under."""
        if self is ProviderName.LINKEDIN:
            return PrincipalType.USER
        return PrincipalType.ORGANIZATION


class UserRole(_ValuesMixin, str, Enum):
    """Role carried by the authenticated caller identity."""

    ADMIN = "admin"
    MEMBER = "member"


class ConnectionStatus(_ValuesMixin, str, Enum):
    """Platform connection flag."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class CredentialStatus(_ValuesMixin, str, Enum):
    """Runtime credential status. REVOKED is terminal until a new authorization."""

    ACTIVE = "active"
    REVOKED = "revoked"


class RefreshTokenPolicy(_ValuesMixin, str, Enum):
    """What a provider means when a refresh response omits refresh_token."""

    KEEP_EXISTING = "keep_existing"
    REQUIRED = "required"
