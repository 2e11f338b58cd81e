"""Application interfaces (ports): repository, session and provider protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IManagedAccountRepository,
    IOrganizationRepository,
    IPlatformCredentialRepository,
    IPlatformRepository,
    ITransactionManager,
)
from app.application.interfaces.services import (
    IGoogleAdsAdapter,
    ILinkedInPageAdapter,
    IProviderAdapter,
    IProviderRegistry,
    ISecretCodec,
    IStateSigner,
)
from app.application.interfaces.session import ISession

__all__ = [
    "IGoogleAdsAdapter",
    "ILinkedInPageAdapter",
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
]
