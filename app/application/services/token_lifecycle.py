"""Token lifecycle: serve cached access tokens, refresh on expiry, classify failures.

States per (platform, principal):
    NoCredential -> Valid            authorization completes (upsert)
    Valid        -> Expired          clock reaches expires_at
    Expired      -> Valid            refresh succeeds
    Expired      -> Reauthorization  refresh rejected (revoked / invalid grant)

Reauthorization is persisted as credential status "revoked" and is only left
by a fresh authorization, which upserts an active row.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from app.domain.enums import PlatformName, PrincipalType, ProviderName
from app.domain.exceptions import (
    AuthenticationRequired,
    NotFound,
    ProviderGrantRevoked,
    ProviderRequestError,
    ReauthorizationRequired,
    TransientProviderError,
    TransientRefreshFailure,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock, SystemClock

if TYPE_CHECKING:
    from app.application.dtos.credentials import PlatformResult, RuntimeCredential
    from app.application.interfaces.services import IProviderRegistry
    from app.application.services.credential_store import CredentialStore
    from app.domain.value_objects import Principal, TokenSet

logger = get_logger(__name__)


def provider_for(platform: PlatformName, principal_type: PrincipalType) -> ProviderName:
    """Return the adapter that owns grants of principal_type on platform."""
    if platform is PlatformName.GOOGLE_ADS:
        return ProviderName.GOOGLE_ADS
    if principal_type is PrincipalType.USER:
        return ProviderName.LINKEDIN
    return ProviderName.LINKEDIN_PAGE


class TokenLifecycleManager:
    """Decide per call whether the stored token is usable or must be refreshed."""

    def __init__(
        self,
        store: CredentialStore,
        registry: IProviderRegistry,
        clock: Clock | None = None,
        refresh_skew_seconds: int = 0,
    ) -> None:
        self.store = store
        self.registry = registry
        self.clock = clock or SystemClock()
        self.refresh_skew_seconds = refresh_skew_seconds

    async def get_valid_access_token(
        self,
        platform_id: str,
        principal: Principal,
        provider: ProviderName | None = None,
    ) -> str:
        """Return a usable access token, refreshing it first when expired.

        provider names the connection being used, for errors raised before the
        platform row is found.

        Raises:
            AuthenticationRequired: No grant stored for (platform_id, principal),
                or no platform row when provider is given.
            NotFound: No platform row and no provider given.
            ReauthorizationRequired: Grant revoked, or expired without a refresh token.
            TransientRefreshFailure: Refresh failed for a retryable reason.
        """
        token_set = await self.get_valid_token_set(platform_id, principal, provider)
        return token_set.access_token

    async def get_valid_token_set(
        self,
        platform_id: str,
        principal: Principal,
        provider: ProviderName | None = None,
    ) -> TokenSet:
        """Same as get_valid_access_token but returns the whole TokenSet."""
        platform = await self.store.get_platform_by_id(platform_id)
        if platform is None:
            if provider is None:
                raise NotFound("platform", platform_id)
            raise AuthenticationRequired(provider.value)
        provider = provider_for(platform.name, principal.principal_type)

        credential = await self.store.get_runtime_credential(platform_id, principal)
        if credential is None:
            raise AuthenticationRequired(provider.value)
        if credential.is_revoked:
            raise ReauthorizationRequired(provider.value, reason="revoked")
        if not credential.token_set.is_expired(self.clock.now(), self.refresh_skew_seconds):
            return credential.token_set
        return await self._refresh(platform, credential, provider)

    async def _refresh(
        self,
        platform: PlatformResult,
        credential: RuntimeCredential,
        provider: ProviderName,
    ) -> TokenSet:
        current = credential.token_set
        if not current.refresh_token:
            logger.info(
                "%s token for platform %s expired with no refresh token", provider.value, platform.id
            )
            raise ReauthorizationRequired(provider.value, reason="expired")

        app_credentials = await self.store.get_app_credentials(
            platform.organization_id, platform.name
        )
        adapter = self.registry.get(provider)
        try:
            refreshed = await adapter.refresh(app_credentials, current.refresh_token)
        except ProviderGrantRevoked as e:
            logger.warning(
                "%s refresh rejected for platform %s (%s); reauthorization required",
                provider.value,
                platform.id,
                e.provider_error,
            )
            await self.store.mark_revoked(platform.id, credential.principal)
            raise ReauthorizationRequired(provider.value, reason=e.provider_error) from e
        except TransientProviderError as e:
            logger.warning(
                "%s refresh for platform %s failed transiently: %s",
                provider.value,
                platform.id,
                e.message,
            )
            raise TransientRefreshFailure(provider.value, e) from e
        except ProviderRequestError as e:
            logger.warning(
                "%s refresh for platform %s failed with HTTP %s",
                provider.value,
                platform.id,
                e.status_code,
            )
            raise TransientRefreshFailure(provider.value) from e

        if not refreshed.scopes and current.scopes:
            refreshed = replace(refreshed, scopes=current.scopes)
        await self.store.upsert_runtime_credential(platform.id, credential.principal, refreshed)
        logger.info(
            "Refreshed %s token for platform %s; expires_at=%s",
            provider.value,
            platform.id,
            refreshed.expires_at.isoformat(),
        )
        return refreshed
