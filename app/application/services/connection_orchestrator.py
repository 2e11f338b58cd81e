"""Connection orchestrator: connect, callback, test, fetch, disconnect per provider.

Composes the credential store, token lifecycle, state token manager and
provider adapters. Organization-level mutations require the admin role;
LinkedIn profile sign-in is per user and only needs an authenticated caller.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, Any, cast

from app.application.dtos.connection import (
    AuthorizationUrl,
    CallbackResult,
    ConnectionTestResult,
    DependentResources,
    LinkedInPreferences,
    ManagedAccountResult,
    StoredProfile,
)
from app.application.dtos.provider import GoogleAdsCustomer, ManagedAccountData
from app.domain.enums import ConnectionStatus, PlatformName, PrincipalType, ProviderName
from app.domain.exceptions import (
    AuthenticationRequired,
    ConnectionDisabled,
    CredentialsInvalid,
    CredentialsNotFound,
    Forbidden,
    NotFound,
    ProviderException,
    ProviderGrantRevoked,
    ProviderRequestError,
    ReauthorizationRequired,
    TransientProviderError,
    Unauthenticated,
    ValidationException,
)
from app.domain.value_objects import CallerIdentity, Principal
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.application.dtos.credentials import AppCredentials, PlatformResult
    from app.application.interfaces.repositories import (
        ILinkedInProfileRepository,
        IManagedAccountRepository,
        ITransactionManager,
    )
    from app.application.interfaces.services import (
        IGoogleAdsAdapter,
        ILinkedInPageAdapter,
        IProviderAdapter,
        IProviderRegistry,
    )
    from app.application.interfaces.session import ISession
    from app.application.services.credential_store import CredentialStore
    from app.application.services.state_token_manager import StateTokenManager
    from app.application.services.token_lifecycle import TokenLifecycleManager

logger = get_logger(__name__)


def principal_for(provider: ProviderName, caller: CallerIdentity | None) -> Principal:
    """Return the principal a provider's grant is stored under for this caller."""
    if provider.principal_type is PrincipalType.USER:
        if caller is None:
            raise Unauthenticated()
        return Principal.user(caller.user_id)
    return Principal.organization()


class ConnectionOrchestrator:
    """Multi-step connection flows for one organization."""

    def __init__(
        self,
        store: CredentialStore,
        lifecycle: TokenLifecycleManager,
        state_manager: StateTokenManager,
        registry: IProviderRegistry,
        managed_account_repo: IManagedAccountRepository,
        transaction_manager: ITransactionManager,
        redirect_uris: dict[ProviderName, str],
        page_selection_url: str,
        profile_repo: ILinkedInProfileRepository,
    ) -> None:
        self.store = store
        self.lifecycle = lifecycle
        self.state_manager = state_manager
        self.registry = registry
        self.managed_account_repo = managed_account_repo
        self.transaction_manager = transaction_manager
        self.redirect_uris = redirect_uris
        self.page_selection_url = page_selection_url
        self.profile_repo = profile_repo

    # ---- Role checks ----

    @staticmethod
    def _require_caller(caller: CallerIdentity | None) -> CallerIdentity:
        if caller is None or not caller.user_id:
            raise Unauthenticated()
        return caller

    def _require_admin(self, caller: CallerIdentity | None, action: str) -> CallerIdentity:
        caller = self._require_caller(caller)
        if not caller.is_admin:
            logger.warning("User %s denied %s (role=%s)", caller.user_id, action, caller.role.value)
            raise Forbidden(action)
        return caller

    def _require_provider_role(
        self, caller: CallerIdentity | None, provider: ProviderName, action: str
    ) -> CallerIdentity:
        """Admin for organization-level grants; any authenticated user for per-user grants."""
        if provider.principal_type is PrincipalType.USER:
            return self._require_caller(caller)
        return self._require_admin(caller, action)

    async def _require_sign_in_enabled(
        self, organization_id: str, provider: ProviderName
    ) -> None:
        if provider is not ProviderName.LINKEDIN:
            return
        if not await self.store.linkedin_sign_in_enabled(organization_id):
            logger.info("LinkedIn sign-in is disabled for organization %s", organization_id)
            raise ConnectionDisabled(provider.value)

    # ---- App credentials ----

    async def save_app_credentials(
        self,
        organization_id: str,
        platform: PlatformName,
        fields: dict[str, str],
        caller: CallerIdentity | None,
    ) -> PlatformResult:
        """Store platform app credentials (admin only)."""
        self._require_admin(caller, "save_app_credentials")
        return await self.store.save_app_credentials(organization_id, platform, fields)

    async def get_app_credentials(
        self,
        organization_id: str,
        platform: PlatformName,
        caller: CallerIdentity | None,
    ) -> AppCredentials:
        """Return decrypted platform app credentials (admin only)."""
        self._require_admin(caller, "view_app_credentials")
        return await self.store.get_app_credentials(organization_id, platform)

    async def _load_app_credentials(
        self, organization_id: str, provider: ProviderName
    ) -> AppCredentials:
        try:
            return await self.store.get_app_credentials(organization_id, provider.platform)
        except CredentialsNotFound as e:
            raise AuthenticationRequired(
                provider.value,
                message=f"{provider.platform.value} app credentials are not configured",
            ) from e

    # ---- Authorization ----

    async def generate_authorization_url(
        self,
        organization_id: str,
        provider: ProviderName,
        session: ISession,
        caller: CallerIdentity | None = None,
    ) -> AuthorizationUrl:
        """Begin a flow in session and return the provider consent URL.

        Raises:
            AuthenticationRequired: App credentials are not configured.
        """
        app_credentials = await self._load_app_credentials(organization_id, provider)
        adapter = self.registry.get(provider)
        state = await self.state_manager.begin_flow(
            session, provider, caller.user_id if caller else None
        )
        url = adapter.build_authorization_url(
            app_credentials,
            self.redirect_uris[provider],
            adapter.DEFAULT_SCOPES,
            state,
        )
        return AuthorizationUrl(provider=provider, url=url)

    async def connect(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession,
    ) -> AuthorizationUrl:
        """Check the caller may connect provider and return the consent URL.

        Raises:
            ConnectionDisabled: LinkedIn sign-in is turned off for the organization.
        """
        caller = self._require_provider_role(caller, provider, f"connect_{provider.value}")
        await self._require_sign_in_enabled(organization_id, provider)
        await self.store.ensure_platform(organization_id, provider.platform)
        return await self.generate_authorization_url(organization_id, provider, session, caller)

    async def handle_authorization_callback(
        self,
        organization_id: str,
        provider: ProviderName,
        code: str | None,
        state: str | None,
        session: ISession,
        error: str | None = None,
    ) -> CallbackResult:
        """Validate state, exchange the code and store (or stage) the grant.

        State is checked before anything else so a forged callback never
        reaches the provider.

        Raises:
            InvalidState: State missing or not issued to this session.
            ConsentRequired: Provider omitted a required refresh token.
            ConnectionDisabled: LinkedIn sign-in was turned off after the flow began.
        """
        flow =await self.state_manager.validate_flow(session, provider, state)
        if error:
            raise AuthenticationRequired(
                provider.value, message=f"Authorization was not granted: {error}"
            )
        if not code:
            raise ValidationException("Missing authorization code", field="code")
        await self._require_sign_in_enabled(organization_id, provider)

        app_credentials = await self._load_app_credentials(organization_id, provider)
        adapter = self.registry.get(provider)
        try:
            token_set = await adapter.exchange_code(
                app_credentials, code, self.redirect_uris[provider]
            )
        except ProviderGrantRevoked as e:
            raise AuthenticationRequired(
                provider.value,
                message="The authorization code was rejected; start the connection again",
            ) from e
        platform = await self.store.ensure_platform(organization_id, provider.platform)

        if provider is ProviderName.LINKEDIN_PAGE:
            page_adapter = cast("ILinkedInPageAdapter", adapter)
            candidates = await page_adapter.list_managed_accounts(token_set.access_token)
            if not candidates:
                raise NotFound("managed_account")
            await self.state_manager.stage_selection(
                session, provider, candidates, token_set, flow.user_id
            )
            logger.info(
                "Staged %d LinkedIn pages for selection (organization %s)",
                len(candidates),
                organization_id,
            )
            return CallbackResult(
                provider=provider,
                redirect_to=self.page_selection_url,
                candidates=candidates,
            )

        profile = None
        if provider is ProviderName.LINKEDIN:
            if not flow.user_id:
                raise Unauthenticated("LinkedIn sign-in requires a signed-in user")
            profile = await adapter.fetch_profile(token_set.access_token)
            if not profile.email:
                raise ValidationException("LinkedIn profile has no email address", field="email")
            principal = Principal.user(flow.user_id)
        else:
            principal = Principal.organization()

        async with self.transaction_manager.transaction():
            await self.store.upsert_runtime_credential(platform.id, principal, token_set)
            if profile is not None and flow.user_id:
                await self.profile_repo.upsert(organization_id, flow.user_id, profile)
            await self.store.set_connection_status(platform.id, ConnectionStatus.CONNECTED)
        logger.info("Connected %s for organization %s", provider.value, organization_id)
        return CallbackResult(provider=provider, token_set=token_set, profile=profile)

    # ---- Page selection ----

    async def list_staged_accounts(
        self,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession,
    ) -> list[ManagedAccountData]:
        """Return candidates awaiting selection in session (admin only)."""
        self._require_admin(caller, "select_managed_account")
        return await self.state_manager.list_staged(session, provider)

    async def select_managed_account(
        self,
        organization_id: str,
        provider: ProviderName,
        chosen_id: str,
        caller: CallerIdentity | None,
        session: ISession,
    ) -> ManagedAccountResult:
        """Persist the chosen page and its grant, then fetch dependent resources best-effort.

        Raises:
            NotFound: Nothing staged, or chosen_id was not offered.
        """
        self._require_admin(caller, "select_managed_account")
        selection = await self.state_manager.take_selection(session, provider, chosen_id)
        adapter = cast("ILinkedInPageAdapter", self.registry.get(provider))
        access_token = selection.token_set.access_token
        account = await self._with_media(adapter, selection.candidate, access_token)

        platform = await self.store.ensure_platform(organization_id, provider.platform)
        async with self.transaction_manager.transaction():
            managed = await self.managed_account_repo.upsert(
                organization_id, platform.id, account
            )
            await self.store.upsert_runtime_credential(
                platform.id, Principal.organization(), selection.token_set
            )
            await self.store.set_connection_status(platform.id, ConnectionStatus.CONNECTED)

        try:
            await self._sync_dependent_resources(adapter, access_token, managed.id)
        except (ProviderException, TransientProviderError) as e:
            logger.warning(
                "Fetching ad accounts for page %s failed: %s",
                account.external_account_id,
                e.message,
            )
        result = await self.managed_account_repo.get(
            organization_id, account.external_account_id
        )
        return result or managed

    async def _with_media(
        self,
        adapter: ILinkedInPageAdapter,
        account: ManagedAccountData,
        access_token: str,
    ) -> ManagedAccountData:
        """Resolve logo and cover URNs to URLs; unresolved images stay None."""
        logo_url = await adapter.resolve_media_url(account.logo_urn, access_token)
        cover_url = await adapter.resolve_media_url(account.cover_photo_urn, access_token)
        return replace(account, logo_url=logo_url, cover_photo_url=cover_url)

    # ---- Token access with authorization URL attached ----

    async def _authorization_url_or_none(
        self,
        organization_id: str,
        provider: ProviderName,
        session: ISession | None,
        caller: CallerIdentity | None,
    ) -> str | None:
        if session is None:
            return None
        try:
            auth = await self.generate_authorization_url(
                organization_id, provider, session, caller
            )
        except (AuthenticationRequired, CredentialsInvalid):
            return None
        return auth.url

    @asynccontextmanager
    async def _authorization_errors(
        self,
        organization_id: str,
        provider: ProviderName,
        session: ISession | None,
        caller: CallerIdentity | None,
    ) -> AsyncIterator[None]:
        """Re-raise missing/revoked grant errors with a ready-made authorization URL."""
        try:
            yield
        except CredentialsNotFound as e:
            url = await self._authorization_url_or_none(
                organization_id, provider, session, caller
            )
            raise AuthenticationRequired(provider.value, authorization_url=url) from e
        except AuthenticationRequired as e:
            if e.authorization_url:
                raise
            url = await self._authorization_url_or_none(
                organization_id, provider, session, caller
            )
            raise AuthenticationRequired(
                provider.value, message=e.message, authorization_url=url
            ) from e
        except ReauthorizationRequired as e:
            if e.authorization_url:
                raise
            url = await self._authorization_url_or_none(
                organization_id, provider, session, caller
            )
            raise ReauthorizationRequired(
                provider.value, reason=e.reason, authorization_url=url
            ) from e
        except ProviderGrantRevoked as e:
            # The provider rejected a token we still considered valid.
            platform = await self.store.get_platform(organization_id, provider.platform)
            if platform is not None:
                await self.store.mark_revoked(platform.id, principal_for(provider, caller))
            url = await self._authorization_url_or_none(
                organization_id, provider, session, caller
            )
            raise ReauthorizationRequired(
                provider.value, reason=e.provider_error, authorization_url=url
            ) from e

    async def _connected_platform(
        self, organization_id: str, provider: ProviderName
    ) -> PlatformResult:
        platform = await self.store.get_platform(organization_id, provider.platform)
        if platform is None:
            raise AuthenticationRequired(provider.value)
        return platform

    async def _access_token(
        self,
        platform: PlatformResult,
        provider: ProviderName,
        caller: CallerIdentity | None,
    ) -> str:
        return await self.lifecycle.get_valid_access_token(
            platform.id, principal_for(provider, caller), provider
        )

    async def _google_customer(
        self, organization_id: str, access_token: str
    ) -> GoogleAdsCustomer:
        app_credentials = await self.store.get_app_credentials(
            organization_id, PlatformName.GOOGLE_ADS
        )
        customer_id = app_credentials.fields["customer_account_id"]
        return GoogleAdsCustomer(
            customer_id=customer_id,
            developer_token=app_credentials.fields["developer_token"],
            access_token=access_token,
            login_customer_id=customer_id,
        )

    # ---- Test connection ----

    async def test_connection(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession | None = None,
    ) -> ConnectionTestResult:
        """Make one live read against the provider with a valid token.

        Raises:
            AuthenticationRequired: Not connected yet (authorization_url attached when possible).
            ReauthorizationRequired: Grant revoked (authorization_url attached when possible).
        """
        caller = self._require_provider_role(caller, provider, f"test_{provider.value}")
        async with self._authorization_errors(organization_id, provider, session, caller):
            platform = await self._connected_platform(organization_id, provider)
            access_token = await self._access_token(platform, provider, caller)
            adapter = self.registry.get(provider)
            if provider is ProviderName.GOOGLE_ADS:
                google = cast("IGoogleAdsAdapter", adapter)
                customer = await self._google_customer(organization_id, access_token)
                row = await google.test_connection(customer)
                if row is None:
                    return ConnectionTestResult(provider=provider, ok=False)
                return ConnectionTestResult(
                    provider=provider,
                    ok=True,
                    account_id=str(row.get("id")) if row.get("id") is not None else None,
                    account_name=row.get("descriptiveName"),
                )
            profile = await adapter.fetch_profile(access_token)
            return ConnectionTestResult(
                provider=provider,
                ok=True,
                account_id=profile.provider_user_id,
                account_name=profile.name or profile.email,
                details={"email": profile.email} if profile.email else {},
            )

    # ---- Managed account info ----

    async def connect_and_fetch_managed_account_info(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession | None = None,
    ) -> list[ManagedAccountResult]:
        """Fetch managed account metadata from the provider and cache it."""
        return await self.fetch_and_cache_managed_account_info(
            organization_id, provider, caller, session
        )

    async def fetch_and_cache_managed_account_info(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession | None = None,
    ) -> list[ManagedAccountResult]:
        """Refresh the managed-account cache from the provider (admin only).

        Google: the configured manager customer and its direct client accounts.
        LinkedIn pages: metadata of every cached page plus ad accounts and
        campaign groups.
        """
        self._require_admin(caller, "fetch_managed_account_info")
        if provider is ProviderName.LINKEDIN:
            raise ValidationException(
                "LinkedIn profile connections have no managed accounts", field="provider"
            )
        async with self._authorization_errors(organization_id, provider, session, caller):
            platform = await self._connected_platform(organization_id, provider)
            access_token = await self._access_token(platform, provider, caller)
            if provider is ProviderName.GOOGLE_ADS:
                return await self._fetch_google_manager(organization_id, platform, access_token)
            return await self._fetch_linkedin_pages(organization_id, platform, access_token)

    async def _fetch_google_manager(
        self,
        organization_id: str,
        platform: PlatformResult,
        access_token: str,
    ) -> list[ManagedAccountResult]:
        adapter = cast("IGoogleAdsAdapter", self.registry.get(ProviderName.GOOGLE_ADS))
        customer = await self._google_customer(organization_id, access_token)
        manager = await adapter.get_manager_account(customer)
        if manager is None:
            raise NotFound("managed_account", customer.customer_id)
        clients = await adapter.list_client_accounts(customer)
        async with self.transaction_manager.transaction():
            managed = await self.managed_account_repo.upsert(
                organization_id, platform.id, manager
            )
            await self.managed_account_repo.upsert_ad_accounts(managed.id, clients)
        logger.info(
            "Cached Google Ads manager %s with %d client accounts",
            manager.external_account_id,
            len(clients),
        )
        return await self.managed_account_repo.list_for_platform(organization_id, platform.id)

    async def _fetch_linkedin_pages(
        self,
        organization_id: str,
        platform: PlatformResult,
        access_token: str,
    ) -> list[ManagedAccountResult]:
        adapter = cast("ILinkedInPageAdapter", self.registry.get(ProviderName.LINKEDIN_PAGE))
        cached = await self.managed_account_repo.list_for_platform(organization_id, platform.id)
        if not cached:
            raise NotFound("managed_account")
        for entry in cached:
            page_id = entry.account.external_account_id
            try:
                fresh = await adapter.get_organization(access_token, page_id)
                fresh = replace(fresh, role=entry.account.role)
                fresh = await self._with_media(adapter, fresh, access_token)
                managed = await self.managed_account_repo.upsert(
                    organization_id, platform.id, fresh
                )
                await self._sync_dependent_resources(adapter, access_token, managed.id)
            except (ProviderRequestError, TransientProviderError) as e:
                # ProviderGrantRevoked propagates.
                logger.warning(
                    "Refresh of LinkedIn page %s failed; keeping cached entry: %s",
                    page_id,
                    e.message,
                )
        return await self.managed_account_repo.list_for_platform(organization_id, platform.id)

    async def fetch_dependent_resources(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession | None = None,
        account_id: str | None = None,
    ) -> list[DependentResources]:
        """Fetch ad accounts and campaign groups for cached pages (admin only).

        Raises:
            NotFound: account_id given but not cached.
        """
        self._require_admin(caller, "fetch_dependent_resources")
        if provider is not ProviderName.LINKEDIN_PAGE:
            raise ValidationException(
                "Dependent resources are fetched per LinkedIn page", field="provider"
            )
        async with self._authorization_errors(organization_id, provider, session, caller):
            platform = await self._connected_platform(organization_id, provider)
            if account_id:
                one = await self.managed_account_repo.get(organization_id, account_id)
                if one is None:
                    raise NotFound("managed_account", account_id)
                targets = [one]
            else:
                targets = await self.managed_account_repo.list_for_platform(
                    organization_id, platform.id
                )
            access_token = await self._access_token(platform, provider, caller)
            adapter = cast("ILinkedInPageAdapter", self.registry.get(provider))
            return [
                await self._sync_dependent_resources(adapter, access_token, t.id)
                for t in targets
            ]

    async def _sync_dependent_resources(
        self,
        adapter: ILinkedInPageAdapter,
        access_token: str,
        managed_account_id: str,
    ) -> DependentResources:
        """Upsert ad accounts, then campaign groups per account; one account failing yields no groups."""
        ad_accounts = await adapter.list_ad_accounts(access_token)
        ids = await self.managed_account_repo.upsert_ad_accounts(managed_account_id, ad_accounts)
        groups_by_account: dict[str, Any] = {}
        for account in ad_accounts:
            try:
                groups = await adapter.list_dependent_groups(access_token, account.external_id)
            except (ProviderException, TransientProviderError) as e:
                logger.warning(
                    "Campaign groups for ad account %s unavailable: %s",
                    account.external_id,
                    e.message,
                )
                groups = []
            await self.managed_account_repo.upsert_campaign_groups(
                ids[account.external_id], groups
            )
            groups_by_account[account.external_id] = groups
        return DependentResources(
            managed_account_id=managed_account_id,
            ad_accounts=ad_accounts,
            campaign_groups=groups_by_account,
        )

    async def get_managed_account_info(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
    ) -> list[ManagedAccountResult]:
        """Return cached managed accounts (empty when nothing was fetched yet)."""
        self._require_caller(caller)
        platform = await self.store.get_platform(organization_id, provider.platform)
        if platform is None:
            return []
        return await self.managed_account_repo.list_for_platform(organization_id, platform.id)

    # ---- LinkedIn profile and preferences ----

    async def get_stored_profile(
        self, organization_id: str, caller: CallerIdentity | None
    ) -> StoredProfile | None:
        """Return the caller's saved LinkedIn profile, or None when they never signed in."""
        caller = self._require_caller(caller)
        return await self.profile_repo.get(organization_id, caller.user_id)

    async def get_linkedin_preferences(
        self, organization_id: str, caller: CallerIdentity | None
    ) -> LinkedInPreferences:
        self._require_caller(caller)
        enabled = await self.store.linkedin_sign_in_enabled(organization_id)
        return LinkedInPreferences(sign_in_enabled=enabled)

    async def update_linkedin_preferences(
        self,
        organization_id: str,
        sign_in_enabled: bool,
        caller: CallerIdentity | None,
    ) -> LinkedInPreferences:
        """Turn LinkedIn user sign-in on or off for the organization (admin only).

        Existing profile grants are kept; only new connections are refused.
        """
        self._require_admin(caller, "update_linkedin_preferences")
        await self.store.set_linkedin_sign_in_enabled(organization_id, sign_in_enabled)
        return LinkedInPreferences(sign_in_enabled=sign_in_enabled)

    # ---- Disconnect ----

    async def disconnect(
        self,
        organization_id: str,
        provider: ProviderName,
        caller: CallerIdentity | None,
        session: ISession | None = None,
        account_id: str | None = None,
    ) -> None:
        """Delete cached managed accounts and the runtime grant in one transaction.

        With account_id only that managed account is removed; the grant goes
        too once no managed account remains. A LinkedIn profile disconnect also
        deletes the caller's stored profile.

        Raises:
            NotFound: Nothing to disconnect, or account_id not cached.
        """
        caller = self._require_provider_role(caller, provider, f"disconnect_{provider.value}")
        platform = await self.store.get_platform(organization_id, provider.platform)
        if platform is None:
            raise NotFound("connection", provider.value)
        principal = principal_for(provider, caller)
        org_level = provider.principal_type is PrincipalType.ORGANIZATION

        async with self.transaction_manager.transaction():
            removed_accounts = 0
            delete_credential = True
            if org_level:
                if account_id:
                    if not await self.managed_account_repo.delete(organization_id, account_id):
                        raise NotFound("managed_account", account_id)
                    removed_accounts = 1
                    remaining = await self.managed_account_repo.list_for_platform(
                        organization_id, platform.id
                    )
                    delete_credential = not remaining
                else:
                    removed_accounts = await self.managed_account_repo.delete_for_platform(
                        organization_id, platform.id
                    )
            removed_profile = False
            if provider is ProviderName.LINKEDIN:
                removed_profile = await self.profile_repo.delete(
                    organization_id, caller.user_id
                )
            removed_credential = False
            if delete_credential:
                removed_credential = await self.store.delete_runtime_credential(
                    platform.id, principal
                )
                if org_level:
                    await self.store.set_connection_status(
                        platform.id, ConnectionStatus.DISCONNECTED
                    )
            if not removed_accounts and not removed_credential and not removed_profile:
                raise NotFound("connection", provider.value)

        if session is not None:
            await self.state_manager.clear(session, provider)
        logger.info(
            "Disconnected %s for organization %s (accounts removed=%d)",
            provider.value,
            organization_id,
            removed_accounts,
        )
