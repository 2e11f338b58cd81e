"""Repository dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db_transactional
from app.infrastructure.persistence.repositories import (
    LinkedInProfileRepository,
    ManagedAccountRepository,
    OrganizationRepository,
    PlatformCredentialRepository,
    PlatformRepository,
    SqlAlchemyTransactionManager,
)

DbSession = Annotated[AsyncSession, Depends(get_db_transactional)]


async def get_organization_repo(db: DbSession) -> OrganizationRepository:
    return OrganizationRepository(db)


async def get_platform_repo(db: DbSession) -> PlatformRepository:
    return PlatformRepository(db)


async def get_platform_credential_repo(db: DbSession) -> PlatformCredentialRepository:
    return PlatformCredentialRepository(db)


async def get_managed_account_repo(db: DbSession) -> ManagedAccountRepository:
    return ManagedAccountRepository(db)


async def get_linkedin_profile_repo(db: DbSession) -> LinkedInProfileRepository:
    return LinkedInProfileRepository(db)


async def get_transaction_manager(db: DbSession) -> SqlAlchemyTransactionManager:
    """Savepoint manager on the same request session as the repositories."""
    return SqlAlchemyTransactionManager(db)
