"""Tests for platform connection endpoints.

The orchestrator is overridden with one over in-memory repositories and a
stubbed provider API, so these run without Postgres or network access.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_connection_orchestrator
from app.application.services.connection_orchestrator import ConnectionOrchestrator
from app.application.services.credential_store import CredentialStore
from app.application.services.state_token_manager import StateTokenManager
from app.application.services.token_lifecycle import TokenLifecycleManager
from app.core.config import get_settings
from app.domain.enums import ProviderName
from app.infrastructure.external.providers import ProviderRegistry
from app.infrastructure.security.jwt import create_access_token
from app.main import app
from tests.conftest import TEST_ORGANIZATION_ID
from tests.fakes import ProviderApiStub, google_app_fields, make_repositories

PAGE_SELECTION_URL = "https://app.example/linkedin/select-page"


def _headers(role: str = "admin", user_id: str = "user-admin") -> dict[str, str]:
    token = create_access_token({"sub": user_id, "org": TEST_ORGANIZATION_ID, "role": role})
    return {"Authorization": f"Bearer {token}"}


def _session_cookie(response: httpx.Response) -> dict[str, str]:
    name = get_settings().session_cookie_name
    return {"Cookie": f"{name}={response.cookies[name]}"}


@pytest.fixture
def repos():
    return make_repositories()


@pytest.fixture
def api() -> ProviderApiStub:
    return ProviderApiStub()


@pytest.fixture
def wired(repos, api, codec, signer, clock):
    store = CredentialStore(repos.organizations, repos.platforms, repos.credentials, codec)
    registry = ProviderRegistry(http_client=api.client(), clock=clock)
    orchestrator = ConnectionOrchestrator(
        store=store,
        lifecycle=TokenLifecycleManager(store, registry, clock),
        state_manager=StateTokenManager(signer, codec, clock),
        registry=registry,
        managed_account_repo=repos.managed,
        transaction_manager=repos.transactions,
        redirect_uris={
            ProviderName.GOOGLE_ADS: "https://api.example/google/callback",
            ProviderName.LINKEDIN: "https://api.example/linkedin/callback",
            ProviderName.LINKEDIN_PAGE: "https://api.example/linkedin_page/callback",
        },
        page_selection_url=PAGE_SELECTION_URL,
        profile_repo=repos.profiles,
    )
    app.dependency_overrides[get_connection_orchestrator] = lambda: orchestrator
    yield orchestrator
    app.dependency_overrides.pop(get_connection_orchestrator, None)


async def test_missing_bearer_token_returns_401(client: AsyncClient) -> None:
    response = await client.post("/api/v1/platforms/google_ads/authorize")
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHENTICATED"


async def test_invalid_bearer_token_returns_401(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/platforms/google_ads/managed-accounts",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


async def test_unknown_provider_returns_422(client: AsyncClient, wired) -> None:
    response = await client.post("/api/v1/platforms/facebook/authorize", headers=_headers())
    assert response.status_code == 422


async def test_without_database_returns_503(client: AsyncClient) -> None:
    if get_settings().database_url:
        pytest.skip("DATABASE_URL is configured")
    response = await client.get(
        "/api/v1/platforms/google_ads/managed-accounts", headers=_headers()
    )
    assert response.status_code == 503
    assert response.json()["error"] == "DATABASE_NOT_CONFIGURED"


async def test_save_app_credentials_requires_admin(client: AsyncClient, wired, repos) -> None:
    response = await client.put(
        "/api/v1/platforms/google_ads/app-credentials",
        json=google_app_fields(),
        headers=_headers(role="member", user_id="user-member"),
    )
    assert response.status_code == 403
    assert response.json()["error"] == "FORBIDDEN"
    assert repos.db.organizations == {}


async def test_save_and_read_masked_app_credentials(client: AsyncClient, wired) -> None:
    saved = await client.put(
        "/api/v1/platforms/google_ads/app-credentials",
        json=google_app_fields(),
        headers=_headers(),
    )
    assert saved.status_code == 200
    assert saved.json()["name"] == "google_ads"
    assert saved.json()["connection_status"] == "disconnected"

    read = await client.get("/api/v1/platforms/google_ads/app-credentials", headers=_headers())
    assert read.status_code == 200
    assert read.json()["fields"]["client_secret"] == "****cret"


async def test_save_app_credentials_missing_google_field_returns_400(
    client: AsyncClient, wired
) -> None:
    response = await client.put(
        "/api/v1/platforms/google_ads/app-credentials",
        json={"client_id": "id", "client_secret": "secret"},
        headers=_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_authorize_callback_test_disconnect(client: AsyncClient, wired, api) -> None:
    await client.put(
        "/api/v1/platforms/google_ads/app-credentials",
        json=google_app_fields(),
        headers=_headers(),
    )
    authorize = await client.post("/api/v1/platforms/google_ads/authorize", headers=_headers())
    assert authorize.status_code == 200
    url = authorize.json()["authorization_url"]
    state = parse_qs(urlparse(url).query)["state"][0]
    cookie = _session_cookie(authorize)

    api.route(
        "oauth2.googleapis.com/token",
        httpx.Response(200, json={"access_token": "g-at", "refresh_token": "g-rt", "expires_in": 3600}),
    )
    callback = await client.get(
        "/api/v1/platforms/google_ads/callback",
        params={"code": "g-code", "state": state},
        headers=cookie,
    )
    assert callback.status_code == 200
    assert callback.json()["connected"] is True

    api.route(
        "googleads.googleapis.com/",
        httpx.Response(
            200, json={"results": [{"customer": {"id": "1234567890", "descriptiveName": "Acme"}}]}
        ),
    )
    tested = await client.post(
        "/api/v1/platforms/google_ads/test", headers={**_headers(), **cookie}
    )
    assert tested.status_code == 200
    assert tested.json()["ok"] is True
    assert tested.json()["account_name"] == "Acme"

    deleted = await client.delete(
        "/api/v1/platforms/google_ads/connection", headers={**_headers(), **cookie}
    )
    assert deleted.status_code == 204

    again = await client.delete(
        "/api/v1/platforms/google_ads/connection", headers={**_headers(), **cookie}
    )
    assert again.status_code == 404


async def test_callback_without_flow_returns_400(client: AsyncClient, wired) -> None:
    response = await client.get(
        "/api/v1/platforms/google_ads/callback", params={"code": "c", "state": "s"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_STATE"


async def test_test_connection_before_connect_includes_authorization_url(
    client: AsyncClient, wired
) -> None:
    await client.put(
        "/api/v1/platforms/google_ads/app-credentials",
        json=google_app_fields(),
        headers=_headers(),
    )
    response = await client.post("/api/v1/platforms/google_ads/test", headers=_headers())
    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "AUTHENTICATION_REQUIRED"
    assert body["details"]["authorization_url"].startswith("https://accounts.google.com/")


async def test_page_callback_redirects_to_selection(client: AsyncClient, wired, api) -> None:
    await client.put(
        "/api/v1/platforms/linkedin/app-credentials",
        json={"client_id": "li-id", "client_secret": "li-secret"},
        headers=_headers(),
    )
    authorize = await client.post("/api/v1/platforms/linkedin_page/authorize", headers=_headers())
    state = parse_qs(urlparse(authorize.json()["authorization_url"]).query)["state"][0]
    cookie = _session_cookie(authorize)
    api.route(
        "www.linkedin.com/oauth/v2/accessToken",
        httpx.Response(200, json={"access_token": "li-at", "expires_in": 5184000}),
    )
    api.route(
        "api.linkedin.com/v2/organizationAcls",
        httpx.Response(
            200, json={"elements": [{"organization": "urn:li:organization:111", "role": "ADMINISTRATOR"}]}
        ),
    )
    api.route(
        "api.linkedin.com/v2/organizations/",
        httpx.Response(200, json={"localizedName": "Acme Page"}),
    )
    api.route("api.linkedin.com/rest/adAccountUsers", httpx.Response(200, json={"elements": []}))

    callback = await client.get(
        "/api/v1/platforms/linkedin_page/callback",
        params={"code": "li-code", "state": state},
        headers=cookie,
    )
    assert callback.status_code == 303
    assert callback.headers["location"] == PAGE_SELECTION_URL

    staged = await client.get(
        "/api/v1/platforms/linkedin_page/staged-accounts", headers={**_headers(), **cookie}
    )
    assert staged.json() == [
        {
            "external_account_id": "111",
            "name": "Acme Page",
            "role": "ADMINISTRATOR",
            "vanity_name": None,
            "logo_urn": None,
        }
    ]

    selected = await client.post(
        "/api/v1/platforms/linkedin_page/select-account",
        json={"account_id": "111"},
        headers={**_headers(), **cookie},
    )
    assert selected.status_code == 200
    assert selected.json()["name"] == "Acme Page"

    listed = await client.get(
        "/api/v1/platforms/linkedin_page/managed-accounts",
        headers=_headers(role="member", user_id="user-member"),
    )
    assert [a["external_account_id"] for a in listed.json()] == ["111"]


async def test_linkedin_sign_in_stores_profile_until_disconnect(
    client: AsyncClient, wired, api
) -> None:
    member = _headers(role="member", user_id="user-member")
    await client.put(
        "/api/v1/platforms/linkedin/app-credentials",
        json={"client_id": "li-id", "client_secret": "li-secret"},
        headers=_headers(),
    )
    before = await client.get("/api/v1/platforms/linkedin/profile", headers=member)
    assert before.status_code == 200
    assert before.json() is None

    authorize = await client.post("/api/v1/platforms/linkedin/authorize", headers=member)
    assert authorize.status_code == 200
    state = parse_qs(urlparse(authorize.json()["authorization_url"]).query)["state"][0]
    cookie = _session_cookie(authorize)
    api.route(
        "www.linkedin.com/oauth/v2/accessToken",
        httpx.Response(200, json={"access_token": "li-at", "expires_in": 3600}),
    )
    api.route(
        "api.linkedin.com/v2/userinfo",
        httpx.Response(
            200,
            json={"sub": "li-sub", "email": "m@example.com", "name": "Mia Member"},
        ),
    )
    callback = await client.get(
        "/api/v1/platforms/linkedin/callback",
        params={"code": "li-code", "state": state},
        headers=cookie,
    )
    assert callback.status_code == 200
    assert callback.json()["email"] == "m@example.com"

    profile = await client.get("/api/v1/platforms/linkedin/profile", headers=member)
    assert profile.json()["linkedin_id"] == "li-sub"
    assert profile.json()["name"] == "Mia Member"
    admin_view = await client.get("/api/v1/platforms/linkedin/profile", headers=_headers())
    assert admin_view.json() is None

    deleted = await client.delete(
        "/api/v1/platforms/linkedin/connection", headers={**member, **cookie}
    )
    assert deleted.status_code == 204
    after = await client.get("/api/v1/platforms/linkedin/profile", headers=member)
    assert after.json() is None


async def test_linkedin_preferences_gate_profile_authorize(
    client: AsyncClient, wired, repos
) -> None:
    member = _headers(role="member", user_id="user-member")
    await client.put(
        "/api/v1/platforms/linkedin/app-credentials",
        json={"client_id": "li-id", "client_secret": "li-secret"},
        headers=_headers(),
    )
    default = await client.get("/api/v1/platforms/linkedin/preferences", headers=member)
    assert default.json() == {"sign_in_enabled": True}

    denied = await client.put(
        "/api/v1/platforms/linkedin/preferences",
        json={"sign_in_enabled": False},
        headers=member,
    )
    assert denied.status_code == 403
    assert denied.json()["error"] == "FORBIDDEN"

    updated = await client.put(
        "/api/v1/platforms/linkedin/preferences",
        json={"sign_in_enabled": False},
        headers=_headers(),
    )
    assert updated.status_code == 200
    assert updated.json() == {"sign_in_enabled": False}
    assert repos.db.linkedin_sign_in == {TEST_ORGANIZATION_ID: False}

    blocked = await client.post("/api/v1/platforms/linkedin/authorize", headers=member)
    assert blocked.status_code == 403
    assert blocked.json()["error"] == "CONNECTION_DISABLED"

    pages = await client.post("/api/v1/platforms/linkedin_page/authorize", headers=_headers())
    assert pages.status_code == 200
