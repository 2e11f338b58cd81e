"""Platform connection API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AppCredentialsRequest(BaseModel):
    """Request body for PUT /platforms/{platform}/app-credentials.

    Google Ads needs all four fields; LinkedIn needs client_id and client_secret.
    """

    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    developer_token: str | None = Field(None, min_length=1)
    customer_account_id: str | None = Field(
        None, min_length=1, description="Google Ads manager (MCC) customer id"
    )

    def to_fields(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class PlatformResponse(BaseModel):
    """Platform row as returned after saving app credentials."""

    id: str
    name: str
    connection_status: str


class AppCredentialsResponse(BaseModel):
    """App credentials with secret fields masked."""

    platform: str
    fields: dict[str, str]


class AuthorizationUrlResponse(BaseModel):
    """URL the frontend redirects the browser to."""

    provider: str
    authorization_url: str


class ManagedAccountSummary(BaseModel):
    """Candidate page offered for selection."""

    external_account_id: str
    name: str
    role: str | None = None
    vanity_name: str | None = None
    logo_urn: str | None = None


class CallbackResponse(BaseModel):
    """Result of an authorization callback (JSON clients; browsers get a redirect)."""

    provider: str
    connected: bool
    redirect_to: str | None = None
    email: str | None = None
    candidates: list[ManagedAccountSummary] = Field(default_factory=list)


class SelectAccountRequest(BaseModel):
    """Request body for POST /platforms/{provider}/select-account."""

    account_id: str = Field(..., min_length=1)


class ConnectionTestResponse(BaseModel):
    """Result of POST /platforms/{provider}/test."""

    provider: str
    ok: bool
    account_id: str | None = None
    account_name: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class CampaignGroupResponse(BaseModel):
    external_id: str
    urn: str
    name: str
    status: str | None = None
    objective_type: str | None = None
    test: bool = False


class AdAccountResponse(BaseModel):
    id: str
    external_id: str
    name: str | None = None
    status: str | None = None
    currency_code: str | None = None
    campaign_groups: list[CampaignGroupResponse] = Field(default_factory=list)


class ManagedAccountResponse(BaseModel):
    """Cached managed account with its dependent resources."""

    id: str
    external_account_id: str
    name: str
    urn: str | None = None
    role: str | None = None
    vanity_name: str | None = None
    website_url: str | None = None
    description: str | None = None
    logo_url: str | None = None
    cover_photo_url: str | None = None
    currency_code: str | None = None
    time_zone: str | None = None
    staff_count_range: str | None = None
    specialties: list[str] = Field(default_factory=list)
    address: dict[str, Any] | None = None
    ad_accounts: list[AdAccountResponse] = Field(default_factory=list)
    updated_at: datetime | None = None


class DependentResourcesResponse(BaseModel):
    managed_account_id: str
    ad_accounts: int
    campaign_groups: int


class LinkedInProfileResponse(BaseModel):
    """LinkedIn identity saved at the caller's last sign-in."""

    linkedin_id: str
    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture_url: str | None = None
    updated_at: datetime | None = None


class LinkedInPreferencesRequest(BaseModel):
    """Request body for PUT /platforms/linkedin/preferences."""

    sign_in_enabled: bool


class LinkedInPreferencesResponse(BaseModel):
    sign_in_enabled: bool
