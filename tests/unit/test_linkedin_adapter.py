"""Tests for the LinkedIn profile and page adapters against a mocked HTTP transport."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.application.dtos.credentials import AppCredentials
from app.domain.enums import PlatformName
from app.domain.exceptions import ProviderGrantRevoked, TransientProviderError
from app.infrastructure.external.providers.linkedin import (
    PAGE_SIZE,
    LinkedInPageAdapter,
    LinkedInProfileAdapter,
    organization_id_from_urn,
)
from tests.fakes import linkedin_app_fields

APP = AppCredentials(platform=PlatformName.LINKEDIN, fields=linkedin_app_fields())


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _page_adapter(handler, clock) -> LinkedInPageAdapter:
    return LinkedInPageAdapter(http_client=_client(handler), clock=clock)


def test_profile_authorization_url_has_openid_scopes(clock) -> None:
    adapter = LinkedInProfileAdapter(clock=clock)
    url = adapter.build_authorization_url(
        APP, "https://app.example/li", adapter.DEFAULT_SCOPES, "s1"
    )
    query = parse_qs(urlparse(url).query)
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["openid profile email"]
    assert "access_type" not in query


async def test_exchange_without_refresh_token_is_accepted(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "li-at", "expires_in": 5184000})

    adapter = LinkedInProfileAdapter(http_client=_client(handler), clock=clock)
    token_set = await adapter.exchange_code(APP, "code", "https://cb")
    assert token_set.access_token == "li-at"
    assert token_set.refresh_token is None


async def test_refresh_response_echoing_no_token_keeps_old_one(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "li-at-2", "expires_in": 60})

    adapter = LinkedInPageAdapter(http_client=_client(handler), clock=clock)
    token_set = await adapter.refresh(APP, "li-rt")
    assert token_set.refresh_token == "li-rt"


async def test_refresh_invalid_request_is_revocation(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_request"})

    with pytest.raises(ProviderGrantRevoked):
        await _page_adapter(handler, clock).refresh(APP, "li-rt")


async def test_fetch_profile_maps_userinfo(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer li-at"
        return httpx.Response(
            200,
            json={
                "sub": "abc",
                "email": "jane@example.com",
                "name": "Jane Doe",
                "given_name": "Jane",
                "family_name": "Doe",
                "picture": "https://media.example/p.jpg",
            },
        )

    adapter = LinkedInProfileAdapter(http_client=_client(handler), clock=clock)
    profile = await adapter.fetch_profile("li-at")
    assert profile.provider_user_id == "abc"
    assert profile.email == "jane@example.com"
    assert profile.picture_url == "https://media.example/p.jpg"


async def test_fetch_profile_401_is_revocation(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid access token"})

    adapter = LinkedInProfileAdapter(http_client=_client(handler), clock=clock)
    with pytest.raises(ProviderGrantRevoked):
        await adapter.fetch_profile("li-at")


async def test_list_managed_accounts_pages_and_degrades_failed_lookups(clock) -> None:
    """Two ACL pages; one organization lookup fails and keeps only id and role."""
    first_page = [
        {"organization": f"urn:li:organization:{i}", "role": "ANALYST"} for i in range(PAGE_SIZE)
    ]
    second_page = [{"organization": "urn:li:organization:0", "role": "ADMINISTRATOR"}]

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v2/organizationAcls":
            start = int(request.url.params["start"])
            return httpx.Response(
                200, json={"elements": first_page if start == 0 else second_page}
            )
        org_id = path.rsplit("/", 1)[-1]
        if org_id == "1":
            return httpx.Response(500, json={})
        return httpx.Response(
            200,
            json={
                "localizedName": f"Org {org_id}",
                "vanityName": f"org-{org_id}",
                "logoV2": {"cropped": f"urn:li:digitalmediaAsset:logo{org_id}"},
            },
        )

    accounts = await _page_adapter(handler, clock).list_managed_accounts("at")

    assert len(accounts) == PAGE_SIZE
    by_id = {a.external_account_id: a for a in accounts}
    assert by_id["0"].role == "ADMINISTRATOR"
    assert by_id["0"].name == "Org 0"
    assert by_id["0"].logo_urn == "urn:li:digitalmediaAsset:logo0"
    assert by_id["1"].name == ""
    assert by_id["1"].role == "ANALYST"


async def test_list_ad_accounts_isolates_detail_failures(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/rest/adAccountUsers":
            assert request.headers["LinkedIn-Version"] == "202411"
            return httpx.Response(
                200,
                json={
                    "elements": [
                        {"account": "urn:li:sponsoredAccount:10", "role": "ACCOUNT_MANAGER"},
                        {"account": "urn:li:sponsoredAccount:20", "role": "VIEWER"},
                        {"role": "VIEWER"},
                    ]
                },
            )
        if path == "/rest/adAccounts/20":
            return httpx.Response(403, json={})
        return httpx.Response(
            200, json={"name": "Main", "status": "ACTIVE", "currency": "USD", "type": "BUSINESS"}
        )

    accounts = await _page_adapter(handler, clock).list_ad_accounts("at")

    assert [a.external_id for a in accounts] == ["10", "20"]
    assert accounts[0].name == "Main"
    assert accounts[0].currency_code == "USD"
    assert accounts[0].extra == {"type": "BUSINESS"}
    assert accounts[1].name is None
    assert accounts[1].role == "VIEWER"


async def test_list_dependent_groups_follows_page_token(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("pageToken") == "next":
            return httpx.Response(200, json={"elements": [{"id": 2, "name": "B"}]})
        return httpx.Response(
            200,
            json={
                "elements": [{"id": 1, "name": "A", "status": "ACTIVE"}, {"name": "no id"}],
                "metadata": {"nextPageToken": "next"},
            },
        )

    groups = await _page_adapter(handler, clock).list_dependent_groups("at", "10")

    assert [g.external_id for g in groups] == ["1", "2"]
    assert groups[0].urn == "urn:li:sponsoredCampaignGroup:1"


async def test_list_dependent_groups_5xx_is_transient(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={})

    with pytest.raises(TransientProviderError):
        await _page_adapter(handler, clock).list_dependent_groups("at", "10")


async def test_resolve_media_url_rewrites_asset_urn(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "image" in request.url.path
        assert "digitalmediaAsset" not in request.url.path
        return httpx.Response(200, json={"downloadUrl": "https://media.example/abc.png"})

    url = await _page_adapter(handler, clock).resolve_media_url(
        "urn:li:digitalmediaAsset:abc", "at"
    )
    assert url == "https://media.example/abc.png"


@pytest.mark.parametrize("status", [403, 404, 500])
async def test_resolve_media_url_none_on_failure(clock, status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={})

    assert await _page_adapter(handler, clock).resolve_media_url("urn:li:image:x", "at") is None


@pytest.mark.parametrize(
    "body",
    [
        [{"downloadUrl": "https://media.example/abc.png"}],
        "https://media.example/abc.png",
        {"downloadUrl": 7},
    ],
)
async def test_resolve_media_url_none_on_unexpected_body(clock, body) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    assert await _page_adapter(handler, clock).resolve_media_url("urn:li:image:x", "at") is None


async def test_resolve_media_url_none_without_urn(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _page_adapter(handler, clock).resolve_media_url(None, "at") is None


def test_organization_id_from_urn() -> None:
    assert organization_id_from_urn("urn:li:organization:123") == "123"
