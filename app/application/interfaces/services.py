"""Service interfaces (ports) for the application layer.

Provider adapters are implemented in app.infrastructure.external.providers;
application services depend only on these protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Protocol

from app.domain.enums import ProviderName, RefreshTokenPolicy

if TYPE_CHECKING:
    from app.application.dtos.credentials import AppCredentials
    from app.application.dtos.provider import (
        AdAccountData,
        CampaignGroupData,
        GoogleAdsCustomer,
        ManagedAccountData,
        ProviderProfile,
    )
    from app.domain.value_objects import TokenSet


class IProviderAdapter(Protocol):
    """Capability set every provider adapter implements."""

    PROVIDER_NAME: ClassVar[ProviderName]
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]]
    REFRESH_TOKEN_REQUIRED_ON_GRANT: ClassVar[bool]
    REFRESH_TOKEN_POLICY: ClassVar[RefreshTokenPolicy]

    def build_authorization_url(
        self,
        app_credentials: AppCredentials,
        redirect_uri: str,
        scope: list[str] | tuple[str, ...],
        state: str,
    ) -> str:
        """Return the consent URL the browser is redirected to."""

    async def exchange_code(
        self, app_credentials: AppCredentials, code: str, redirect_uri: str
    ) -> TokenSet:
        """Exchange an authorization code for a TokenSet."""

    async def refresh(
        self, app_credentials: AppCredentials, refresh_token: str
    ) -> TokenSet:
        """Exchange a refresh token for a new TokenSet."""

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Return the identity behind access_token."""


class IGoogleAdsAdapter(IProviderAdapter, Protocol):
    """Google Ads adds GAQL queries."""

    async def run_query(
        self, customer: GoogleAdsCustomer, gaql: str
    ) -> list[dict[str, Any]]:
        """Run a GAQL query and return every result row (all pages)."""


class ILinkedInPageAdapter(IProviderAdapter, Protocol):
    """LinkedIn organization pages add account listing and media resolution."""

    async def list_managed_accounts(self, access_token: str) -> list[ManagedAccountData]:
        """Return organizations the token holder administers."""

    async def list_ad_accounts(self, access_token: str) -> list[AdAccountData]:
        """Return sponsored ad accounts the token holder can access."""

    async def list_dependent_groups(
        self, access_token: str, account_id: str
    ) -> list[CampaignGroupData]:
        """Return campaign groups of one ad account."""

    async def resolve_media_url(self, urn: str | None, access_token: str) -> str | None:
        """Resolve a media URN to a download URL; None when unavailable."""


class IProviderRegistry(Protocol):
    """Dispatch adapters by provider-name tag."""

    def get(self, provider: ProviderName) -> IProviderAdapter:
        """Return the adapter for provider."""


class ISecretCodec(Protocol):
    """Symmetric encryption for values stored at rest or in the session."""

    def encrypt(self, plaintext: str) -> str:
        """Return an envelope string."""

    def decrypt(self, envelope: str) -> str:
        """Return plaintext; raises DecryptionError on a bad envelope or key."""

    def encrypt_optional(self, plaintext: str | None) -> str | None:
        """Encrypt when present."""

    def decrypt_optional(self, envelope: str | None) -> str | None:
        """Decrypt when present."""


class IStateSigner(Protocol):
    """Sign and verify OAuth state ids."""

    def sign(self, state_id: str) -> str:
        """Return the signed state."""

    def verify(self, signed_state: str) -> str:
        """Return state_id; raises ValueError when the signature does not match."""
