"""Platform connection repository integration tests. Require Postgres; session is rolled back after each test."""

from datetime import UTC, datetime, timedelta

import pytest

from app.application.dtos.credentials import StoredCredential
from app.application.dtos.provider import (
    AdAccountData,
    CampaignGroupData,
    ManagedAccountData,
    ProviderProfile,
)
from app.domain.enums import ConnectionStatus, CredentialStatus, PlatformName
from app.domain.value_objects import Principal
from app.infrastructure.persistence.repositories.linkedin_profile_repo import (
    LinkedInProfileRepository,
)
from app.infrastructure.persistence.repositories.managed_account_repo import (
    ManagedAccountRepository,
)
from app.infrastructure.persistence.repositories.organization_repo import (
    OrganizationRepository,
)
from app.infrastructure.persistence.repositories.platform_credential_repo import (
    PlatformCredentialRepository,
)
from app.infrastructure.persistence.repositories.platform_repo import PlatformRepository
from app.infrastructure.persistence.repositories.transaction import (
    SqlAlchemyTransactionManager,
)
from app.shared.utils.generators import generate_cuid


async def _organization(db_session) -> str:
    organization_id = generate_cuid()
    await OrganizationRepository(db_session).set_app_credentials(
        organization_id, PlatformName.LINKEDIN, {"client_id": "enc-id", "client_secret": "enc-secret"}
    )
    return organization_id


def _credential(platform_id: str, principal: Principal, access: str) -> StoredCredential:
    return StoredCredential(
        platform_id=platform_id,
        principal=principal,
        access_token_encrypted=access,
        refresh_token_encrypted="enc-refresh",
        expires_at=datetime.now(UTC) + timedelta(hours=1),
        scopes=["r_basicprofile"],
        status=CredentialStatus.ACTIVE,
    )


@pytest.mark.requires_db
async def test_app_credentials_create_organization_and_merge(db_session) -> None:
    """First save creates the organization; later saves keep other platforms."""
    repo = OrganizationRepository(db_session)
    organization_id = await _organization(db_session)

    await repo.set_app_credentials(
        organization_id, PlatformName.GOOGLE_ADS, {"client_id": "enc-google"}
    )

    assert await repo.get_app_credentials(organization_id, PlatformName.LINKEDIN) == {
        "client_id": "enc-id",
        "client_secret": "enc-secret",
    }
    assert await repo.get_app_credentials(organization_id, PlatformName.GOOGLE_ADS) == {
        "client_id": "enc-google"
    }


@pytest.mark.requires_db
async def test_app_credentials_unknown_organization_returns_none(db_session) -> None:
    repo = OrganizationRepository(db_session)
    assert await repo.get_app_credentials("nonexistent-org-xyz", PlatformName.LINKEDIN) is None


@pytest.mark.requires_db
async def test_platform_get_or_create_is_idempotent(db_session) -> None:
    organization_id = await _organization(db_session)
    repo = PlatformRepository(db_session)

    first = await repo.get_or_create(organization_id, PlatformName.LINKEDIN)
    second = await repo.get_or_create(organization_id, PlatformName.LINKEDIN)

    assert first.id == second.id
    assert first.connection_status is ConnectionStatus.DISCONNECTED
    assert await repo.get(organization_id, PlatformName.GOOGLE_ADS) is None


@pytest.mark.requires_db
async def test_platform_set_connection_status(db_session) -> None:
    organization_id = await _organization(db_session)
    repo = PlatformRepository(db_session)
    platform = await repo.get_or_create(organization_id, PlatformName.GOOGLE_ADS)

    await repo.set_connection_status(platform.id, ConnectionStatus.CONNECTED)

    found = await repo.get_by_id(platform.id)
    assert found is not None
    assert found.connection_status is ConnectionStatus.CONNECTED


@pytest.mark.requires_db
async def test_credential_upsert_keeps_one_row_per_principal(db_session) -> None:
    organization_id = await _organization(db_session)
    platform = await PlatformRepository(db_session).get_or_create(
        organization_id, PlatformName.LINKEDIN
    )
    repo = PlatformCredentialRepository(db_session)
    user = Principal.user("user-1")

    await repo.upsert(_credential(platform.id, user, "enc-access-1"))
    await repo.upsert(_credential(platform.id, user, "enc-access-2"))
    await repo.upsert(_credential(platform.id, Principal.organization(), "enc-org"))

    found = await repo.get(platform.id, user)
    assert found is not None
    assert found.access_token_encrypted == "enc-access-2"
    assert found.principal == user
    org = await repo.get(platform.id, Principal.organization())
    assert org is not None
    assert org.access_token_encrypted == "enc-org"
    assert await repo.get(platform.id, Principal.user("user-2")) is None


@pytest.mark.requires_db
async def test_credential_set_status_and_delete(db_session) -> None:
    organization_id = await _organization(db_session)
    platform = await PlatformRepository(db_session).get_or_create(
        organization_id, PlatformName.GOOGLE_ADS
    )
    repo = PlatformCredentialRepository(db_session)
    principal = Principal.organization()
    await repo.upsert(_credential(platform.id, principal, "enc-access"))

    await repo.set_status(platform.id, principal, CredentialStatus.REVOKED)
    revoked = await repo.get(platform.id, principal)
    assert revoked is not None
    assert revoked.status is CredentialStatus.REVOKED

    assert await repo.delete(platform.id, principal) is True
    assert await repo.delete(platform.id, principal) is False
    assert await repo.get(platform.id, principal) is None


@pytest.mark.requires_db
async def test_managed_account_with_ad_accounts_and_groups(db_session) -> None:
    organization_id = await _organization(db_session)
    platform = await PlatformRepository(db_session).get_or_create(
        organization_id, PlatformName.LINKEDIN
    )
    repo = ManagedAccountRepository(db_session)

    managed = await repo.upsert(
        organization_id,
        platform.id,
        ManagedAccountData(
            external_account_id="1001",
            name="Acme",
            urn="urn:li:organization:1001",
            role="ADMINISTRATOR",
            specialties=["ads"],
        ),
    )
    ids = await repo.upsert_ad_accounts(
        managed.id,
        [AdAccountData(external_id="501", name="Acme Ads", currency_code="USD")],
    )
    count = await repo.upsert_campaign_groups(
        ids["501"],
        [
            CampaignGroupData(
                external_id="9", urn="urn:li:sponsoredCampaignGroup:9", name="Q3"
            )
        ],
    )
    assert count == 1

    renamed = await repo.upsert(
        organization_id,
        platform.id,
        ManagedAccountData(external_account_id="1001", name="Acme Inc"),
    )
    assert renamed.id == managed.id

    found = await repo.get(organization_id, "1001")
    assert found is not None
    assert found.account.name == "Acme Inc"
    assert [a.external_id for a in found.ad_accounts] == ["501"]
    assert [g.name for g in found.ad_accounts[0].campaign_groups] == ["Q3"]


@pytest.mark.requires_db
async def test_managed_account_delete_for_platform(db_session) -> None:
    organization_id = await _organization(db_session)
    platform = await PlatformRepository(db_session).get_or_create(
        organization_id, PlatformName.LINKEDIN
    )
    repo = ManagedAccountRepository(db_session)
    for external_id in ("1001", "1002"):
        await repo.upsert(
            organization_id,
            platform.id,
            ManagedAccountData(external_account_id=external_id, name=external_id),
        )

    assert len(await repo.list_for_platform(organization_id, platform.id)) == 2
    assert await repo.delete(organization_id, "1001") is True
    assert await repo.delete_for_platform(organization_id, platform.id) == 1
    assert await repo.list_for_platform(organization_id, platform.id) == []


@pytest.mark.requires_db
async def test_transaction_rolls_back_block_on_error(db_session) -> None:
    """A failing block is undone; earlier work in the session survives."""
    organization_id = await _organization(db_session)
    platform = await PlatformRepository(db_session).get_or_create(
        organization_id, PlatformName.GOOGLE_ADS
    )
    repo = PlatformCredentialRepository(db_session)
    principal = Principal.organization()
    await repo.upsert(_credential(platform.id, principal, "enc-access"))

    with pytest.raises(RuntimeError):
        async with SqlAlchemyTransactionManager(db_session).transaction():
            await repo.delete(platform.id, principal)
            raise RuntimeError("boom")

    assert await repo.get(platform.id, principal) is not None


@pytest.mark.requires_db
async def test_linkedin_sign_in_preference_defaults_to_unset(db_session) -> None:
    repo = OrganizationRepository(db_session)
    organization_id = await _organization(db_session)
    assert await repo.get_linkedin_sign_in_enabled(organization_id) is None

    await repo.set_linkedin_sign_in_enabled(organization_id, False)
    assert await repo.get_linkedin_sign_in_enabled(organization_id) is False

    new_org = generate_cuid()
    await repo.set_linkedin_sign_in_enabled(new_org, True)
    assert await repo.get_linkedin_sign_in_enabled(new_org) is True
    assert await repo.get_app_credentials(new_org, PlatformName.LINKEDIN) is None


@pytest.mark.requires_db
async def test_linkedin_profile_upsert_get_delete(db_session) -> None:
    organization_id = await _organization(db_session)
    repo = LinkedInProfileRepository(db_session)

    first = await repo.upsert(
        organization_id,
        "user-1",
        ProviderProfile(provider_user_id="li-sub", email="m@example.com", name="Mia"),
    )
    assert first.profile.email == "m@example.com"
    await repo.upsert(
        organization_id,
        "user-1",
        ProviderProfile(provider_user_id="li-sub", email="m@example.com", name="Mia M."),
    )

    found = await repo.get(organization_id, "user-1")
    assert found is not None
    assert found.profile.name == "Mia M."
    assert found.profile.provider_user_id == "li-sub"
    assert await repo.get(organization_id, "user-2") is None

    assert await repo.delete(organization_id, "user-1") is True
    assert await repo.delete(organization_id, "user-1") is False
    assert await repo.get(organization_id, "user-1") is None
