"""Application services: credential store, state tokens, token lifecycle, orchestration."""

from app.application.services.connection_orchestrator import (
    ConnectionOrchestrator,
    principal_for,
)
from app.application.services.credential_store import CredentialStore
from app.application.services.state_token_manager import StateTokenManager
from app.application.services.token_lifecycle import TokenLifecycleManager, provider_for

__all__ = [
    "ConnectionOrchestrator",
    "CredentialStore",
    "StateTokenManager",
    "TokenLifecycleManager",
    "principal_for",
    "provider_for",
]
