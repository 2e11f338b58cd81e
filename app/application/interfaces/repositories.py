"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain values only; no infrastructure imports.
The core needs key-based lookup, upsert, delete and one multi-statement
transaction boundary; nothing else about the storage engine.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol

from app.domain.enums import ConnectionStatus, CredentialStatus, PlatformName

if TYPE_CHECKING:
    from app.application.dtos.connection import ManagedAccountResult, StoredProfile
    from app.application.dtos.credentials import PlatformResult, StoredCredential
    from app.application.dtos.provider import (
        AdAccountData,
        CampaignGroupData,
        ManagedAccountData,
        ProviderProfile,
    )
    from app.domain.value_objects import Principal


class IOrganizationRepository(Protocol):
    """Protocol for organization rows holding encrypted app credentials."""

    async def get_app_credentials(
        self, organization_id: str, platform: PlatformName
    ) -> dict[str, str] | None:
        """Return the encrypted field map for platform, or None when never configured."""

    async def set_app_credentials(
        self,
        organization_id: str,
        platform: PlatformName,
        encrypted_fields: dict[str, str],
    ) -> None:
        """Replace platform's encrypted field map; creates the organization if absent."""

    async def get_linkedin_sign_in_enabled(self, organization_id: str) -> bool | None:
        """Return the stored sign-in flag, or None when never set."""

    async def set_linkedin_sign_in_enabled(
        self, organization_id: str, enabled: bool
    ) -> None:
        """Store the sign-in flag; creates the organization if absent."""


class IPlatformRepository(Protocol):
    """Protocol for platform rows, unique per (organization_id, name)."""

    async def get(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult | None:
        """Return the platform for organization, or None."""

    async def get_by_id(self, platform_id: str) -> PlatformResult | None:
        """Return the platform by id, or None."""

    async def get_or_create(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult:
        """Return the platform, creating it (disconnected) if absent."""

    async def set_connection_status(
        self, platform_id: str, status: ConnectionStatus
    ) -> None:
        """Update the connection flag."""


class IPlatformCredentialRepository(Protocol):
    """Protocol for runtime credentials, unique per (platform_id, principal)."""

    async def upsert(self, credential: StoredCredential) -> StoredCredential:
        """Insert or replace the row for the credential's key (last writer wins)."""

    async def get(
        self, platform_id: str, principal: Principal
    ) -> StoredCredential | None:
        """Return the row for key, or None."""

    async def delete(self, platform_id: str, principal: Principal) -> bool:
        """Delete the row for key. Returns True if a row was removed."""

    async def set_status(
        self, platform_id: str, principal: Principal, status: CredentialStatus
    ) -> None:
        """Update status on an existing row (no-op when absent)."""


class IManagedAccountRepository(Protocol):
    """Protocol for cached managed accounts and their dependent resources."""

    async def upsert(
        self,
        organization_id: str,
        platform_id: str,
        account: ManagedAccountData,
    ) -> ManagedAccountResult:
        """Insert or update by (organization_id, external_account_id)."""

    async def get(
        self, organization_id: str, external_account_id: str
    ) -> ManagedAccountResult | None:
        """Return one cached managed account with dependent resources, or None."""

    async def list_for_platform(
        self, organization_id: str, platform_id: str
    ) -> list[ManagedAccountResult]:
        """Return all cached managed accounts for a platform."""

    async def delete(self, organization_id: str, external_account_id: str) -> bool:
        """Delete one managed account (dependent resources cascade)."""

    async def delete_for_platform(self, organization_id: str, platform_id: str) -> int:
        """Delete every managed account for platform. Returns rows removed."""

    async def upsert_ad_accounts(
        self, managed_account_id: str, ad_accounts: list[AdAccountData]
    ) -> dict[str, str]:
        """Upsert ad accounts by external id. Returns external id -> row id."""

    async def upsert_campaign_groups(
        self, ad_account_id: str, groups: list[CampaignGroupData]
    ) -> int:
        """Upsert campaign groups by external id. Returns count written."""


class ILinkedInProfileRepository(Protocol):
    """Protocol for LinkedIn profiles, unique per (organization_id, user_id)."""

    async def upsert(
        self, organization_id: str, user_id: str, profile: ProviderProfile
    ) -> StoredProfile:
        """Insert or replace the user's profile."""

    async def get(self, organization_id: str, user_id: str) -> StoredProfile | None:
        """Return the user's profile, or None."""

    async def delete(self, organization_id: str, user_id: str) -> bool:
        """Delete the user's profile. Returns True if a row was removed."""


class ITransactionManager(Protocol):
    """Protocol for a storage-level atomic boundary across several repository writes."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Return an async context manager; an exception inside rolls back all writes."""
