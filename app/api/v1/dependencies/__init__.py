"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the request transaction, repositories,
connection services, the browser session and the caller identity. Routes
depend only on these, not on infrastructure directly.
"""

from app.api.v1.dependencies.auth import RequestContext, get_request_context
from app.api.v1.dependencies.db import (
    get_linkedin_profile_repo,
    get_managed_account_repo,
    get_organization_repo,
    get_platform_credential_repo,
    get_platform_repo,
    get_transaction_manager,
)
from app.api.v1.dependencies.platforms import (
    get_connection_orchestrator,
    get_credential_store,
    get_provider_registry,
    get_secret_codec,
    get_state_token_manager,
    get_token_lifecycle,
    redirect_uris,
)
from app.api.v1.dependencies.session import ORGANIZATION_SESSION_KEY, get_session

__all__ = [
    "ORGANIZATION_SESSION_KEY",
    "RequestContext",
    "get_connection_orchestrator",
    "get_credential_store",
    "get_linkedin_profile_repo",
    "get_managed_account_repo",
    "get_organization_repo",
    "get_platform_credential_repo",
    "get_platform_repo",
    "get_provider_registry",
    "get_request_context",
    "get_secret_codec",
    "get_session",
    "get_state_token_manager",
    "get_token_lifecycle",
    "get_transaction_manager",
    "redirect_uris",
]
