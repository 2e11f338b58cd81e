"""DTOs returned by provider adapters (normalized provider payloads)."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any


@dataclass(frozen=True)
class ProviderProfile:
    """Identity of the account that authorized the grant."""

    provider_user_id: str
    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture_url: str | None = None


@dataclass(frozen=True)
class ManagedAccountData:
    """Provider-side parent account: Google manager customer or LinkedIn organization page.

    Also used as the staged candidate during page selection, so it must stay
    JSON-serializable (see to_dict / from_dict).
    """

    external_account_id: str
    name: str
    urn: str | None = None
    role: str | None = None
    vanity_name: str | None = None
    website_url: str | None = None
    description: str | None = None
    logo_urn: str | None = None
    logo_url: str | None = None
    cover_photo_urn: str | None = None
    cover_photo_url: str | None = None
    currency_code: str | None = None
    time_zone: str | None = None
    staff_count_range: str | None = None
    specialties: list[str] = field(default_factory=list)
    address: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManagedAccountData":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class AdAccountData:
    """Advertising account under a managed account (Google client or LinkedIn sponsored account)."""

    external_id: str
    name: str | None = None
    urn: str | None = None
    role: str | None = None
    status: str | None = None
    currency_code: str | None = None
    time_zone: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CampaignGroupData:
    """LinkedIn campaign group under a sponsored ad account."""

    external_id: str
    urn: str
    name: str
    account_urn: str | None = None
    status: str | None = None
    objective_type: str | None = None
    test: bool = False
    backfilled: bool = False
    run_schedule: dict[str, Any] | None = None
    total_budget: dict[str, Any] | None = None
    serving_statuses: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GoogleAdsCustomer:
    """Addressing for a Google Ads API call."""

    customer_id: str
    developer_token: str
    access_token: str
    login_customer_id: str | None = None
