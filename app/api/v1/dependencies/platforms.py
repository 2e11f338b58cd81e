"""Connection service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.application.services.connection_orchestrator import ConnectionOrchestrator
from app.application.services.credential_store import CredentialStore
from app.application.services.state_token_manager import StateTokenManager
from app.application.services.token_lifecycle import TokenLifecycleManager
from app.core.config import get_settings
from app.domain.enums import ProviderName
from app.infrastructure.external.providers import ProviderRegistry
from app.infrastructure.persistence.repositories import (
    LinkedInProfileRepository,
    ManagedAccountRepository,
    OrganizationRepository,
    PlatformCredentialRepository,
    PlatformRepository,
    SqlAlchemyTransactionManager,
)
from app.infrastructure.security import OAuthStateSigner, SecretCodec

from .db import (
    get_linkedin_profile_repo,
    get_managed_account_repo,
    get_organization_repo,
    get_platform_credential_repo,
    get_platform_repo,
    get_transaction_manager,
)


def get_secret_codec() -> SecretCodec:
    """Secret codec keyed from ENCRYPTION_KEY (composition root)."""
    return SecretCodec()


def get_provider_registry(request: Request) -> ProviderRegistry:
    """Provider adapters sharing the app's HTTP client (composition root)."""
    settings = get_settings()
    return ProviderRegistry(
        http_client=getattr(request.app.state, "provider_http_client", None),
        timeout=settings.provider_timeout_seconds,
        adapter_options={
            ProviderName.GOOGLE_ADS: {"api_version": settings.google_ads_api_version},
            ProviderName.LINKEDIN: {"api_version": settings.linkedin_api_version},
            ProviderName.LINKEDIN_PAGE: {"api_version": settings.linkedin_api_version},
        },
    )


async def get_credential_store(
    organization_repo: Annotated[OrganizationRepository, Depends(get_organization_repo)],
    platform_repo: Annotated[PlatformRepository, Depends(get_platform_repo)],
    credential_repo: Annotated[
        PlatformCredentialRepository, Depends(get_platform_credential_repo)
    ],
    codec: Annotated[SecretCodec, Depends(get_secret_codec)],
) -> CredentialStore:
    return CredentialStore(organization_repo, platform_repo, credential_repo, codec)


def get_state_token_manager(
    codec: Annotated[SecretCodec, Depends(get_secret_codec)],
) -> StateTokenManager:
    return StateTokenManager(OAuthStateSigner(), codec)


async def get_token_lifecycle(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    registry: Annotated[ProviderRegistry, Depends(get_provider_registry)],
) -> TokenLifecycleManager:
    return TokenLifecycleManager(
        store,
        registry,
        refresh_skew_seconds=get_settings().token_refresh_skew_seconds,
    )


def redirect_uris() -> dict[ProviderName, str]:
    """Redirect URI registered with each provider."""
    settings = get_settings()
    return {
        ProviderName.GOOGLE_ADS: settings.google_redirect_uri,
        ProviderName.LINKEDIN: settings.linkedin_redirect_uri,
        ProviderName.LINKEDIN_PAGE: settings.linkedin_page_redirect_uri,
    }


async def get_connection_orchestrator(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    lifecycle: Annotated[TokenLifecycleManager, Depends(get_token_lifecycle)],
    state_manager: Annotated[StateTokenManager, Depends(get_state_token_manager)],
    registry: Annotated[ProviderRegistry, Depends(get_provider_registry)],
    managed_account_repo: Annotated[
        ManagedAccountRepository, Depends(get_managed_account_repo)
    ],
    transaction_manager: Annotated[
        SqlAlchemyTransactionManager, Depends(get_transaction_manager)
    ],
    profile_repo: Annotated[
        LinkedInProfileRepository, Depends(get_linkedin_profile_repo)
    ],
) -> ConnectionOrchestrator:
    """Orchestrator over one request transaction."""
    return ConnectionOrchestrator(
        store=store,
        lifecycle=lifecycle,
        state_manager=state_manager,
        registry=registry,
        managed_account_repo=managed_account_repo,
        transaction_manager=transaction_manager,
        redirect_uris=redirect_uris(),
        page_selection_url=get_settings().frontend_page_selection_url,
        profile_repo=profile_repo,
    )
