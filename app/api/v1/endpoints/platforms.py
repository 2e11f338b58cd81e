"""Platform connection API: app credentials, authorize/callback, page selection, test, fetch, disconnect, LinkedIn profile.

Uses only injected dependencies from app.api.v1.dependencies. Role checks
and error translation live in the orchestrator; domain exceptions become
HTTP responses in app.core.exception_handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from app.api.v1.dependencies import (
    ORGANIZATION_SESSION_KEY,
    RequestContext,
    get_connection_orchestrator,
    get_request_context,
    get_session,
)
from app.application.dtos.connection import ManagedAccountResult
from app.application.interfaces.session import ISession
from app.application.services.connection_orchestrator import ConnectionOrchestrator
from app.core.limiter import (
    limit_authorize,
    limit_callback,
    limit_provider_calls,
    limit_writes,
)
from app.domain.enums import PlatformName, ProviderName
from app.domain.exceptions import InvalidState
from app.schemas.platform import (
    AdAccountResponse,
    AppCredentialsRequest,
    AppCredentialsResponse,
    AuthorizationUrlResponse,
    CallbackResponse,
    CampaignGroupResponse,
    ConnectionTestResponse,
    DependentResourcesResponse,
    LinkedInPreferencesRequest,
    LinkedInPreferencesResponse,
    LinkedInProfileResponse,
    ManagedAccountResponse,
    ManagedAccountSummary,
    PlatformResponse,
    SelectAccountRequest,
)

router = APIRouter()

Orchestrator = Annotated[ConnectionOrchestrator, Depends(get_connection_orchestrator)]
Context = Annotated[RequestContext, Depends(get_request_context)]
Session = Annotated[ISession, Depends(get_session)]


def _managed_to_response(result: ManagedAccountResult) -> ManagedAccountResponse:
    account = result.account
    return ManagedAccountResponse(
        id=result.id,
        external_account_id=account.external_account_id,
        name=account.name,
        urn=account.urn,
        role=account.role,
        vanity_name=account.vanity_name,
        website_url=account.website_url,
        description=account.description,
        logo_url=account.logo_url,
        cover_photo_url=account.cover_photo_url,
        currency_code=account.currency_code,
        time_zone=account.time_zone,
        staff_count_range=account.staff_count_range,
        specialties=list(account.specialties),
        address=account.address,
        ad_accounts=[
            AdAccountResponse(
                id=a.id,
                external_id=a.external_id,
                name=a.name,
                status=a.status,
                currency_code=a.currency_code,
                campaign_groups=[
                    CampaignGroupResponse(
                        external_id=g.external_id,
                        urn=g.urn,
                        name=g.name,
                        status=g.status,
                        objective_type=g.objective_type,
                        test=g.test,
                    )
                    for g in a.campaign_groups
                ],
            )
            for a in result.ad_accounts
        ],
        updated_at=result.updated_at,
    )


@router.get("/linkedin/profile", response_model=LinkedInProfileResponse | None)
async def get_linkedin_profile(ctx: Context, orchestrator: Orchestrator):
    """The caller's stored LinkedIn profile; null when they have not signed in."""
    stored = await orchestrator.get_stored_profile(ctx.organization_id, ctx.caller)
    if stored is None:
        return None
    profile = stored.profile
    return LinkedInProfileResponse(
        linkedin_id=profile.provider_user_id,
        email=profile.email,
        name=profile.name,
        given_name=profile.given_name,
        family_name=profile.family_name,
        picture_url=profile.picture_url,
        updated_at=stored.updated_at,
    )


@router.get("/linkedin/preferences", response_model=LinkedInPreferencesResponse)
async def get_linkedin_preferences(ctx: Context, orchestrator: Orchestrator):
    preferences = await orchestrator.get_linkedin_preferences(
        ctx.organization_id, ctx.caller
    )
    return LinkedInPreferencesResponse(sign_in_enabled=preferences.sign_in_enabled)


@router.put("/linkedin/preferences", response_model=LinkedInPreferencesResponse)
@limit_writes
async def update_linkedin_preferences(
    request: Request,
    body: LinkedInPreferencesRequest,
    ctx: Context,
    orchestrator: Orchestrator,
):
    """Turn LinkedIn profile sign-in on or off (admin only)."""
    preferences = await orchestrator.update_linkedin_preferences(
        ctx.organization_id, body.sign_in_enabled, ctx.caller
    )
    return LinkedInPreferencesResponse(sign_in_enabled=preferences.sign_in_enabled)


@router.put("/{platform}/app-credentials", response_model=PlatformResponse)
@limit_writes
async def save_app_credentials(
    request: Request,
    platform: PlatformName,
    body: AppCredentialsRequest,
    ctx: Context,
    orchestrator: Orchestrator,
):
    """Store app credentials for platform (admin only)."""
    result = await orchestrator.save_app_credentials(
        ctx.organization_id, platform, body.to_fields(), ctx.caller
    )
    return PlatformResponse(
        id=result.id,
        name=result.name.value,
        connection_status=result.connection_status.value,
    )


@router.get("/{platform}/app-credentials", response_model=AppCredentialsResponse)
async def get_app_credentials(
    platform: PlatformName,
    ctx: Context,
    orchestrator: Orchestrator,
):
    """Return app credentials with secrets masked (admin only)."""
    credentials = await orchestrator.get_app_credentials(
        ctx.organization_id, platform, ctx.caller
    )
    return AppCredentialsResponse(platform=platform.value, fields=credentials.masked())


@router.post("/{provider}/authorize", response_model=AuthorizationUrlResponse)
@limit_authorize
async def authorize(
    request: Request,
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
):
    """Start an authorization flow; the frontend redirects the browser to the returned URL."""
    auth = await orchestrator.connect(ctx.organization_id, provider, ctx.caller, session)
    await session.set(ORGANIZATION_SESSION_KEY, ctx.organization_id)
    return AuthorizationUrlResponse(provider=provider.value, authorization_url=auth.url)


@router.get("/{provider}/callback", response_model=CallbackResponse)
@limit_callback
async def authorization_callback(
    request: Request,
    provider: ProviderName,
    session: Session,
    orchestrator: Orchestrator,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """Provider redirect target. Page connections redirect to the selection screen."""
    organization_id = await session.get(ORGANIZATION_SESSION_KEY)
    if not organization_id:
        raise InvalidState("No authorization flow in progress for this session")
    result = await orchestrator.handle_authorization_callback(
        organization_id, provider, code, state, session, error=error
    )
    if result.requires_selection and result.redirect_to:
        return RedirectResponse(result.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    return CallbackResponse(
        provider=provider.value,
        connected=True,
        email=result.profile.email if result.profile else None,
    )


@router.get("/{provider}/staged-accounts", response_model=list[ManagedAccountSummary])
async def list_staged_accounts(
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
):
    """Candidates awaiting selection after a page callback (admin only)."""
    candidates = await orchestrator.list_staged_accounts(provider, ctx.caller, session)
    return [
        ManagedAccountSummary(
            external_account_id=c.external_account_id,
            name=c.name,
            role=c.role,
            vanity_name=c.vanity_name,
            logo_urn=c.logo_urn,
        )
        for c in candidates
    ]


@router.post("/{provider}/select-account", response_model=ManagedAccountResponse)
@limit_writes
async def select_account(
    request: Request,
    provider: ProviderName,
    body: SelectAccountRequest,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
):
    """Persist the chosen page and finish the connection (admin only)."""
    result = await orchestrator.select_managed_account(
        ctx.organization_id, provider, body.account_id, ctx.caller, session
    )
    return _managed_to_response(result)


@router.post("/{provider}/test", response_model=ConnectionTestResponse)
@limit_provider_calls
async def test_connection(
    request: Request,
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
):
    """Make one live provider call with a valid (refreshed if needed) token."""
    result = await orchestrator.test_connection(
        ctx.organization_id, provider, ctx.caller, session
    )
    return ConnectionTestResponse(
        provider=provider.value,
        ok=result.ok,
        account_id=result.account_id,
        account_name=result.account_name,
        details=result.details,
    )


@router.get("/{provider}/managed-accounts", response_model=list[ManagedAccountResponse])
async def get_managed_accounts(
    provider: ProviderName,
    ctx: Context,
    orchestrator: Orchestrator,
):
    """Cached managed accounts with ad accounts and campaign groups."""
    results = await orchestrator.get_managed_account_info(
        ctx.organization_id, provider, ctx.caller
    )
    return [_managed_to_response(r) for r in results]


@router.post(
    "/{provider}/managed-accounts", response_model=list[ManagedAccountResponse]
)
@limit_provider_calls
async def fetch_managed_accounts(
    request: Request,
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
):
    """Fetch managed account metadata from the provider and cache it (admin only)."""
    results = await orchestrator.fetch_and_cache_managed_account_info(
        ctx.organization_id, provider, ctx.caller, session
    )
    return [_managed_to_response(r) for r in results]


@router.post(
    "/{provider}/dependent-resources",
    response_model=list[DependentResourcesResponse],
)
@limit_provider_calls
async def fetch_dependent_resources(
    request: Request,
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
    account_id: str | None = None,
):
    """Fetch ad accounts and campaign groups for cached pages (admin only)."""
    results = await orchestrator.fetch_dependent_resources(
        ctx.organization_id, provider, ctx.caller, session, account_id=account_id
    )
    return [
        DependentResourcesResponse(
            managed_account_id=r.managed_account_id,
            ad_accounts=len(r.ad_accounts),
            campaign_groups=sum(len(g) for g in r.campaign_groups.values()),
        )
        for r in results
    ]


@router.delete("/{provider}/connection", status_code=status.HTTP_204_NO_CONTENT)
@limit_writes
async def disconnect(
    request: Request,
    provider: ProviderName,
    ctx: Context,
    session: Session,
    orchestrator: Orchestrator,
    account_id: str | None = None,
):
    """Remove cached accounts and the stored grant."""
    await orchestrator.disconnect(
        ctx.organization_id, provider, ctx.caller, session, account_id=account_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
