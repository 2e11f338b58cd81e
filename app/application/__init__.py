"""Application layer: interfaces, DTOs and connection services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, session, adapters).
"""

from app.application.interfaces import (
    IManagedAccountRepository,
    IOrganizationRepository,
    IPlatformCredentialRepository,
    IPlatformRepository,
    IProviderAdapter,
    IProviderRegistry,
    ISecretCodec,
    ISession,
    IStateSigner,
    ITransactionManager,
)
from app.application.services import (
    ConnectionOrchestrator,
    CredentialStore,
    StateTokenManager,
    TokenLifecycleManager,
)

__all__ = [
    "ConnectionOrchestrator",
    "CredentialStore",
    "IManagedAccountRepository",
    "IOrganizationRepository",
    "IPlatformCredentialRepository",
    "IPlatformRepository",
    "IProviderAdapter",
    "IProviderRegistry",
    "ISecretCodec",
    "ISession",
    "IStateSigner",
    "ITransactionManager",
    "StateTokenManager",
    "TokenLifecycleManager",
]
