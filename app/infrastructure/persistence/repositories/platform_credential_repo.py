"""Platform credential repository: one runtime grant per (platform, principal)."""

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.credentials import StoredCredential
from app.domain.enums import CredentialStatus, PrincipalType
from app.domain.value_objects import Principal
from app.infrastructure.persistence.database import replay_on_rollback
from app.infrastructure.persistence.models.platform import PlatformCredential
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.generators import generate_cuid


def _credential_to_stored(c: PlatformCredential) -> StoredCredential:
    """Map ORM PlatformCredential to StoredCredential (tokens stay encrypted)."""
    return StoredCredential(
        platform_id=c.platform_id,
        principal=Principal(PrincipalType(c.principal_type), c.subject_id),
        access_token_encrypted=c.access_token,
        refresh_token_encrypted=c.refresh_token,
        expires_at=c.expires_at,
        scopes=list(c.scopes or []),
        status=CredentialStatus(c.status),
        updated_at=c.updated_at,
    )


def _key(platform_id: str, principal: Principal):
    return and_(
        PlatformCredential.platform_id == platform_id,
        PlatformCredential.principal_type == principal.principal_type.value,
        PlatformCredential.subject_key == principal.subject_key,
    )


class PlatformCredentialRepository(BaseRepository[PlatformCredential]):
    """Runtime credentials; upsert is INSERT .. ON CONFLICT on the principal key."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, PlatformCredential)

    async def upsert(self, credential: StoredCredential) -> StoredCredential:
        values = {
            "access_token": credential.access_token_encrypted,
            "refresh_token": credential.refresh_token_encrypted,
            "expires_at": credential.expires_at,
            "scopes": list(credential.scopes),
            "status": credential.status.value,
        }
        stmt = pg_insert(PlatformCredential).values(
            id=generate_cuid(),
            platform_id=credential.platform_id,
            principal_type=credential.principal.principal_type.value,
            subject_id=credential.principal.subject_id,
            subject_key=credential.principal.subject_key,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_platform_credential_principal",
            set_={**values, "updated_at": func.now()},
        ).returning(PlatformCredential)
        result = await self.db.execute(
            select(PlatformCredential)
            .from_statement(stmt)
            .execution_options(populate_existing=True)
        )
        return _credential_to_stored(result.scalar_one())

    async def get(
        self, platform_id: str, principal: Principal
    ) -> StoredCredential | None:
        result = await self.db.execute(
            select(PlatformCredential)
            .where(_key(platform_id, principal))
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _credential_to_stored(row) if row else None

    async def delete(self, platform_id: str, principal: Principal) -> bool:  # type: ignore[override]
        result = await self.db.execute(
            delete(PlatformCredential).where(_key(platform_id, principal))
        )
        return bool(result.rowcount)

    async def set_status(
        self, platform_id: str, principal: Principal, status: CredentialStatus
    ) -> None:
        """Update status; the change survives a rollback of the surrounding request.

        A status change records the provider's verdict on the grant (e.g. a
        revoked refresh token), which stays true even when the request fails.
        """
        stmt = (
            update(PlatformCredential)
            .where(_key(platform_id, principal))
            .values(status=status.value, updated_at=func.now())
        )
        await self.db.execute(stmt)
        replay_on_rollback(self.db, stmt)
