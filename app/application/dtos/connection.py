"""DTOs for connection flows (authorization, callback, managed-account reads)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.application.dtos.provider import (
    AdAccountData,
    CampaignGroupData,
    ManagedAccountData,
    ProviderProfile,
)
from app.domain.enums import ProviderName
from app.domain.value_objects import TokenSet


@dataclass(frozen=True)
class AuthorizationUrl:
    """Ready-to-redirect provider consent URL."""

    provider: ProviderName
    url: str


@dataclass(frozen=True)
class AuthorizationFlow:
    """Pending authorization flow stored in the session between redirect and callback."""

    provider: ProviderName
    state: str
    user_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class StagedSelection:
    """Candidate chosen from a staged list, with the grant that produced the list."""

    provider: ProviderName
    candidate: ManagedAccountData
    token_set: TokenSet
    user_id: str | None = None


@dataclass(frozen=True)
class CallbackResult:
    """Outcome of an authorization callback.

    Either the grant was stored (token_set set, redirect_to None) or the user
    must pick one of several candidates first (redirect_to and candidates set).
    """

    provider: ProviderName
    token_set: TokenSet | None = None
    profile: ProviderProfile | None = None
    redirect_to: str | None = None
    candidates: list[ManagedAccountData] = field(default_factory=list)

    @property
    def requires_selection(self) -> bool:
        return self.redirect_to is not None


@dataclass(frozen=True)
class ConnectionTestResult:
    """Result of a live test call against the provider."""

    provider: ProviderName
    ok: bool
    account_id: str | None = None
    account_name: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AdAccountResult:
    """Cached ad account with its campaign groups."""

    id: str
    external_id: str
    name: str | None
    urn: str | None
    role: str | None
    status: str | None
    currency_code: str | None
    campaign_groups: list[CampaignGroupData] = field(default_factory=list)


@dataclass(frozen=True)
class ManagedAccountResult:
    """Cached managed account (read-model) with dependent resources."""

    id: str
    organization_id: str
    platform_id: str
    account: ManagedAccountData
    ad_accounts: list[AdAccountResult] = field(default_factory=list)
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DependentResources:
    """Dependent resources fetched for one managed account."""

    managed_account_id: str
    ad_accounts: list[AdAccountData] = field(default_factory=list)
    campaign_groups: dict[str, list[CampaignGroupData]] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredProfile:
    """LinkedIn identity saved for a user when their sign-in completes."""

    organization_id: str
    user_id: str
    profile: ProviderProfile
    updated_at: datetime | None = None


@dataclass(frozen=True)
class LinkedInPreferences:
    """Organization-wide LinkedIn settings. Sign-in is on until an admin turns it off."""

    sign_in_enabled: bool = True
