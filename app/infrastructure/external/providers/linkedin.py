"""LinkedIn adapters: member profile sign-in and organization page administration.

Both share LinkedIn's OAuth endpoints and the userinfo profile call. The page
adapter additionally lists administered organizations, sponsored ad accounts
and campaign groups, and resolves media URNs to download URLs.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from typing import Any, ClassVar
from urllib.parse import quote

import httpx

from app.application.dtos.provider import (
    AdAccountData,
    CampaignGroupData,
    ManagedAccountData,
    ProviderProfile,
)
from app.domain.enums import ProviderName, RefreshTokenPolicy
from app.domain.exceptions import ProviderException, TransientProviderError
from app.infrastructure.external.providers.base import ProviderAdapter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock

logger = get_logger(__name__)

API_BASE = "https://api.linkedin.com"
PAGE_SIZE = 100

ORGANIZATION_URN_PREFIX = "urn:li:organization:"
SPONSORED_ACCOUNT_RE = re.compile(r"urn:li:sponsoredAccount:(\d+)")
DIGITAL_MEDIA_ASSET_PREFIX = "urn:li:digitalmediaAsset:"
IMAGE_URN_PREFIX = "urn:li:image:"

# Roles ranked so the strongest role wins when an ACL lists one organization twice.
_ROLE_RANK = {"ADMINISTRATOR": 0, "CONTENT_ADMINISTRATOR": 1, "ANALYST": 2}


def _localized(value: Any) -> str | None:
    """Pick en_US (or the first) entry from a LinkedIn localized field."""
    if isinstance(value, str):
        return value or None
    if not isinstance(value, dict):
        return None
    localized = value.get("localized")
    if isinstance(localized, dict) and localized:
        return localized.get("en_US") or next(iter(localized.values()))
    return None


def organization_id_from_urn(urn: str) -> str:
    """urn:li:organization:123 -> 123."""
    return urn.removeprefix(ORGANIZATION_URN_PREFIX)


class LinkedInAdapterBase(ProviderAdapter):
    """Shared LinkedIn OAuth endpoints and userinfo."""

    AUTHORIZATION_ENDPOINT: ClassVar[str] = "https://www.linkedin.com/oauth/v2/authorization"
    TOKEN_ENDPOINT: ClassVar[str] = "https://www.linkedin.com/oauth/v2/accessToken"
    USERINFO_ENDPOINT: ClassVar[str] = f"{API_BASE}/v2/userinfo"
    # LinkedIn member tokens live 60 days.
    DEFAULT_EXPIRES_IN: ClassVar[int] = 5_184_000
    # Refresh tokens are only issued to approved partner apps; absence is normal.
    REFRESH_TOKEN_REQUIRED_ON_GRANT: ClassVar[bool] = False
    # Refresh responses may echo the same refresh token or omit it; keep the stored one.
    REFRESH_TOKEN_POLICY: ClassVar[RefreshTokenPolicy] = RefreshTokenPolicy.KEEP_EXISTING

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        timeout: float = 30.0,
        api_version: str = "202411",
    ) -> None:
        super().__init__(http_client=http_client, clock=clock, timeout=timeout)
        self.api_version = api_version

    def _rest_headers(self) -> dict[str, str]:
        return {
            "LinkedIn-Version": self.api_version,
            "X-Restli-Protocol-Version": "2.0.0",
        }

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Return the OpenID Connect userinfo of the member."""
        data = await self._get_json(
            self.USERINFO_ENDPOINT, access_token, operation="userinfo"
        )
        return ProviderProfile(
            provider_user_id=str(data.get("sub", "")),
            email=data.get("email"),
            name=data.get("name"),
            given_name=data.get("given_name"),
            family_name=data.get("family_name"),
            picture_url=data.get("picture"),
        )


class LinkedInProfileAdapter(LinkedInAdapterBase):
    """Per-user LinkedIn sign-in."""

    PROVIDER_NAME: ClassVar[ProviderName] = ProviderName.LINKEDIN
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ("openid", "profile", "email")


class LinkedInPageAdapter(LinkedInAdapterBase):
    """Organization page administration and advertising reads."""

    PROVIDER_NAME: ClassVar[ProviderName] = ProviderName.LINKEDIN_PAGE
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = (
        "rw_organization_admin",
        "r_organization_admin",
        "w_organization_social",
        "rw_ads",
        "r_ads",
        "r_ads_reporting",
        "profile",
        "email",
        "openid",
    )

    # ---- Organizations ----

    async def list_managed_accounts(self, access_token: str) -> list[ManagedAccountData]:
        """Return organizations the member has a role on.

        A failed organization lookup degrades that entry to id and role only.
        """
        acls: dict[str, str | None] = {}
        async for element in self._paged_elements(
            f"{API_BASE}/v2/organizationAcls",
            access_token,
            operation="organization_acls",
            params={"q": "roleAssignee"},
        ):
            urn = element.get("organization") or element.get("organizationTarget")
            if not urn:
                continue
            role = element.get("role")
            current = acls.get(urn)
            if urn not in acls or _ROLE_RANK.get(role or "", 99) < _ROLE_RANK.get(current or "", 99):
                acls[urn] = role

        accounts: list[ManagedAccountData] = []
        for urn, role in acls.items():
            org_id = organization_id_from_urn(urn)
            try:
                data = await self._get_json(
                    f"{API_BASE}/v2/organizations/{org_id}",
                    access_token,
                    operation="organization",
                    headers=self._rest_headers(),
                )
            except (ProviderException, TransientProviderError) as e:
                logger.warning("LinkedIn organization %s lookup failed: %s", org_id, e.message)
                accounts.append(
                    ManagedAccountData(external_account_id=org_id, name="", urn=urn, role=role)
                )
                continue
            accounts.append(self._organization_to_account(org_id, urn, role, data))
        return accounts

    async def get_organization(self, access_token: str, org_id: str) -> ManagedAccountData:
        """Return current metadata for one organization."""
        data = await self._get_json(
            f"{API_BASE}/v2/organizations/{org_id}",
            access_token,
            operation="organization",
            headers=self._rest_headers(),
        )
        return self._organization_to_account(
            org_id, f"{ORGANIZATION_URN_PREFIX}{org_id}", None, data
        )

    @staticmethod
    def _organization_to_account(
        org_id: str, urn: str, role: str | None, data: dict[str, Any]
    ) -> ManagedAccountData:
        locations = data.get("locations") or []
        address = locations[0].get("address") if locations and isinstance(locations[0], dict) else None
        return ManagedAccountData(
            external_account_id=org_id,
            name=data.get("localizedName") or _localized(data.get("name")) or "",
            urn=urn,
            role=role,
            vanity_name=data.get("vanityName"),
            website_url=_localized(data.get("website")) or data.get("localizedWebsite"),
            description=data.get("localizedDescription") or _localized(data.get("description")),
            logo_urn=(data.get("logoV2") or {}).get("cropped"),
            cover_photo_urn=(data.get("coverPhotoV2") or {}).get("cropped"),
            staff_count_range=data.get("staffCountRange"),
            specialties=list(data.get("localizedSpecialties") or []),
            address=address,
        )

    # ---- Advertising ----

    async def list_ad_accounts(self, access_token: str) -> list[AdAccountData]:
        """Return sponsored accounts of the member; per-account detail failures are isolated."""
        users: list[tuple[str, str, str | None]] = []
        async for element in self._paged_elements(
            f"{API_BASE}/rest/adAccountUsers",
            access_token,
            operation="ad_account_users",
            params={"q": "authenticatedUser"},
            headers=self._rest_headers(),
        ):
            match = SPONSORED_ACCOUNT_RE.search(str(element.get("account", "")))
            if not match:
                logger.warning("Skipping adAccountUsers element without account URN")
                continue
            users.append((match.group(1), match.group(0), element.get("role")))

        accounts: list[AdAccountData] = []
        for account_id, urn, role in users:
            try:
                data = await self._get_json(
                    f"{API_BASE}/rest/adAccounts/{account_id}",
                    access_token,
                    operation="ad_account",
                    headers=self._rest_headers(),
                )
            except (ProviderException, TransientProviderError) as e:
                logger.warning("LinkedIn ad account %s lookup failed: %s", account_id, e.message)
                accounts.append(AdAccountData(external_id=account_id, urn=urn, role=role))
                continue
            accounts.append(
                AdAccountData(
                    external_id=account_id,
                    name=data.get("name"),
                    urn=urn,
                    role=role,
                    status=data.get("status"),
                    currency_code=data.get("currency"),
                    extra={
                        k: data[k]
                        for k in ("type", "reference", "test", "servingStatuses")
                        if k in data
                    },
                )
            )
        return accounts

    async def list_dependent_groups(
        self, access_token: str, account_id: str
    ) -> list[CampaignGroupData]:
        """Return campaign groups of one ad account, following pageToken cursors."""
        url = f"{API_BASE}/rest/adAccounts/{account_id}/adCampaignGroups"
        params: dict[str, Any] = {"q": "search", "pageSize": PAGE_SIZE}
        groups: list[CampaignGroupData] = []
        while True:
            data = await self._get_json(
                url,
                access_token,
                operation="campaign_groups",
                params=params,
                headers=self._rest_headers(),
            )
            for element in data.get("elements", []):
                group_id = element.get("id")
                if group_id is None:
                    logger.warning("Skipping campaign group without id in account %s", account_id)
                    continue
                groups.append(
                    CampaignGroupData(
                        external_id=str(group_id),
                        urn=f"urn:li:sponsoredCampaignGroup:{group_id}",
                        name=element.get("name") or "Unnamed Campaign Group",
                        account_urn=element.get("account"),
                        status=element.get("status"),
                        objective_type=element.get("objectiveType"),
                        test=bool(element.get("test", False)),
                        backfilled=bool(element.get("backfilled", False)),
                        run_schedule=element.get("runSchedule"),
                        total_budget=element.get("totalBudget"),
                        serving_statuses=list(element.get("servingStatuses") or []),
                    )
                )
            next_token = (data.get("metadata") or {}).get("nextPageToken")
            if not next_token:
                return groups
            params = {"q": "search", "pageSize": PAGE_SIZE, "pageToken": next_token}

    # ---- Media ----

    async def resolve_media_url(self, urn: str | None, access_token: str) -> str | None:
        """Resolve a digitalmediaAsset/image URN to a download URL; None on any failure."""
        if not urn:
            return None
        image_urn = urn.replace(DIGITAL_MEDIA_ASSET_PREFIX, IMAGE_URN_PREFIX)
        url = f"{API_BASE}/rest/images/{quote(image_urn, safe='')}"
        try:
            response = await self._send(
                "GET",
                url,
                operation="resolve_media",
                headers={"Authorization": f"Bearer {access_token}", **self._rest_headers()},
            )
        except TransientProviderError:
            logger.warning("Media URL resolution for %s failed: network error", urn)
            return None
        if not 200 <= response.status_code < 300:
            logger.warning(
                "Media URL resolution for %s failed with HTTP %s", urn, response.status_code
            )
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            logger.warning("Media URL resolution for %s returned a non-object body", urn)
            return None
        download_url = body.get("downloadUrl")
        return download_url if isinstance(download_url, str) and download_url else None

    # ---- Pagination ----

    async def _paged_elements(
        self,
        url: str,
        access_token: str,
        *,
        operation: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield elements across start/count pages until a short or final page."""
        start = 0
        while True:
            page_params = {**params, "start": start, "count": PAGE_SIZE}
            data = await self._get_json(
                url, access_token, operation=operation, params=page_params, headers=headers
            )
            elements = data.get("elements", [])
            for element in elements:
                yield element
            paging = data.get("paging") or {}
            total = paging.get("total")
            start += len(elements)
            if not elements or len(elements) < PAGE_SIZE:
                return
            if total is not None and start >= total:
                return
