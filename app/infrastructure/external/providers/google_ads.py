"""Google Ads adapter: OAuth with offline access, GAQL search over the REST API."""

from __future__ import annotations

from typing import Any, ClassVar

import httpx

from app.application.dtos.provider import (
    AdAccountData,
    GoogleAdsCustomer,
    ManagedAccountData,
    ProviderProfile,
)
from app.domain.enums import ProviderName, RefreshTokenPolicy
from app.domain.exceptions import ProviderGrantRevoked
from app.infrastructure.external.providers.base import ProviderAdapter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock

logger = get_logger(__name__)

ADWORDS_SCOPE = "https://www.googleapis.com/auth/adwords"

CONNECTION_TEST_QUERY = (
    "SELECT customer.id, customer.descriptive_name FROM customer LIMIT 1"
)
MANAGER_ACCOUNT_QUERY = (
    "SELECT customer.id, customer.descriptive_name, customer.currency_code, "
    "customer.time_zone FROM customer WHERE customer.manager = TRUE LIMIT 1"
)
CLIENT_ACCOUNTS_QUERY = (
    "SELECT customer_client.client_customer, customer_client.level, "
    "customer_client.manager, customer_client.descriptive_name, "
    "customer_client.currency_code, customer_client.time_zone, "
    "customer_client.id, customer_client.status "
    "FROM customer_client WHERE customer_client.level <= 1"
)


def normalize_customer_id(customer_id: str) -> str:
    """Strip dashes and whitespace from a customer id (123-456-7890 -> 1234567890)."""
    return customer_id.replace("-", "").strip()


class GoogleAdsAdapter(ProviderAdapter):
    """Google Ads: refresh token mandatory on grant, reused across refreshes."""

    PROVIDER_NAME: ClassVar[ProviderName] = ProviderName.GOOGLE_ADS
    AUTHORIZATION_ENDPOINT: ClassVar[str] = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_ENDPOINT: ClassVar[str] = "https://oauth2.googleapis.com/token"
    TOKENINFO_ENDPOINT: ClassVar[str] = "https://oauth2.googleapis.com/tokeninfo"
    ADS_API_BASE: ClassVar[str] = "https://googleads.googleapis.com"
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = (ADWORDS_SCOPE,)
    REFRESH_TOKEN_REQUIRED_ON_GRANT: ClassVar[bool] = True
    # Google never rotates refresh tokens on refresh; the response simply omits it.
    REFRESH_TOKEN_POLICY: ClassVar[RefreshTokenPolicy] = RefreshTokenPolicy.KEEP_EXISTING

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        timeout: float = 30.0,
        api_version: str = "v17",
    ) -> None:
        super().__init__(http_client=http_client, clock=clock, timeout=timeout)
        self.api_version = api_version

    def _get_authorization_params(self) -> dict[str, str]:
        return {
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        }

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Describe the grant via tokeninfo (adwords scope carries no userinfo)."""
        data = await self._get_json(
            self.TOKENINFO_ENDPOINT,
            access_token,
            operation="tokeninfo",
            params={"access_token": access_token},
        )
        return ProviderProfile(
            provider_user_id=str(data.get("sub") or data.get("azp") or data.get("aud") or ""),
            email=data.get("email"),
        )

    async def run_query(
        self, customer: GoogleAdsCustomer, gaql: str
    ) -> list[dict[str, Any]]:
        """Run a GAQL search and return all rows, following nextPageToken."""
        customer_id = normalize_customer_id(customer.customer_id)
        url = (
            f"{self.ADS_API_BASE}/{self.api_version}/customers/{customer_id}/googleAds:search"
        )
        headers = {
            "Authorization": f"Bearer {customer.access_token}",
            "developer-token": customer.developer_token,
            "Content-Type": "application/json",
        }
        if customer.login_customer_id:
            headers["login-customer-id"] = normalize_customer_id(customer.login_customer_id)

        rows: list[dict[str, Any]] = []
        body: dict[str, Any] = {"query": gaql}
        while True:
            response = await self._send(
                "POST", url, operation="search", json=body, headers=headers
            )
            if response.status_code == 401:
                raise ProviderGrantRevoked(self.PROVIDER_NAME.value, "invalid_token")
            if response.status_code >= 400:
                error = _google_error_status(response)
                logger.error(
                    "Google Ads search failed for customer %s: status=%s error=%s",
                    customer_id,
                    response.status_code,
                    error,
                )
                self._raise_for_status(response, "search", error)
            data = response.json()
            rows.extend(data.get("results", []))
            next_page = data.get("nextPageToken")
            if not next_page:
                return rows
            body = {"query": gaql, "pageToken": next_page}

    async def test_connection(self, customer: GoogleAdsCustomer) -> dict[str, Any] | None:
        """Return the first customer row, or None when the query yields nothing."""
        rows = await self.run_query(customer, CONNECTION_TEST_QUERY)
        return rows[0].get("customer") if rows else None

    async def get_manager_account(
        self, customer: GoogleAdsCustomer
    ) -> ManagedAccountData | None:
        """Return the manager (MCC) customer, or None if the customer is not a manager."""
        rows = await self.run_query(customer, MANAGER_ACCOUNT_QUERY)
        if not rows:
            return None
        c = rows[0].get("customer", {})
        return ManagedAccountData(
            external_account_id=normalize_customer_id(str(c.get("id", customer.customer_id))),
            name=c.get("descriptiveName") or "",
            urn=c.get("resourceName"),
            currency_code=c.get("currencyCode"),
            time_zone=c.get("timeZone"),
        )

    async def list_client_accounts(self, customer: GoogleAdsCustomer) -> list[AdAccountData]:
        """Return direct (level 1), non-manager client accounts of the manager."""
        rows = await self.run_query(customer, CLIENT_ACCOUNTS_QUERY)
        accounts: list[AdAccountData] = []
        for row in rows:
            cc = row.get("customerClient", {})
            try:
                level = int(cc.get("level", -1))
            except (TypeError, ValueError):
                continue
            if level != 1 or cc.get("manager"):
                continue
            accounts.append(
                AdAccountData(
                    external_id=str(cc.get("id")),
                    name=cc.get("descriptiveName"),
                    urn=cc.get("clientCustomer"),
                    status=cc.get("status"),
                    currency_code=cc.get("currencyCode"),
                    time_zone=cc.get("timeZone"),
                )
            )
        return accounts


def _google_error_status(response: httpx.Response) -> str | None:
    """Extract error.status from a Google API error body."""
    try:
        data = response.json()
    except ValueError:
        return None
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("status")
    return None
