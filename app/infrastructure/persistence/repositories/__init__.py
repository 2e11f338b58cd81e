"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
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

__all__ = [
    "BaseRepository",
    "LinkedInProfileRepository",
    "ManagedAccountRepository",
    "OrganizationRepository",
    "PlatformCredentialRepository",
    "PlatformRepository",
    "SqlAlchemyTransactionManager",
]
