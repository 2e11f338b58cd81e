"""Platform repository, unique per (organization_id, name)."""

from sqlalchemy import and_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.credentials import PlatformResult
from app.domain.enums import ConnectionStatus, PlatformName
from app.infrastructure.persistence.models.platform import Platform
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.generators import generate_cuid


def _platform_to_result(p: Platform) -> PlatformResult:
    """Map ORM Platform to application PlatformResult."""
    return PlatformResult(
        id=p.id,
        organization_id=p.organization_id,
        name=PlatformName(p.name),
        connection_status=ConnectionStatus(p.connection_status),
    )


class PlatformRepository(BaseRepository[Platform]):
    """Platform repository returning PlatformResult DTOs."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Platform)

    async def _get_entity(
        self, organization_id: str, platform: PlatformName
    ) -> Platform | None:
        result = await self.db.execute(
            select(Platform).where(
                and_(
                    Platform.organization_id == organization_id,
                    Platform.name == platform.value,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult | None:
        row = await self._get_entity(organization_id, platform)
        return _platform_to_result(row) if row else None

    async def get_by_id(self, platform_id: str) -> PlatformResult | None:  # type: ignore[override]
        row = await super().get_by_id(platform_id)
        return _platform_to_result(row) if row else None

    async def get_or_create(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult:
        """Insert if absent (concurrent creators converge on one row)."""
        stmt = (
            pg_insert(Platform)
            .values(
                id=generate_cuid(),
                organization_id=organization_id,
                name=platform.value,
                connection_status=ConnectionStatus.DISCONNECTED.value,
            )
            .on_conflict_do_nothing(constraint="uq_platform_org_name")
        )
        await self.db.execute(stmt)
        row = await self._get_entity(organization_id, platform)
        if row is None:
            raise RuntimeError(f"Platform {platform.value} missing after insert")
        return _platform_to_result(row)

    async def set_connection_status(
        self, platform_id: str, status: ConnectionStatus
    ) -> None:
        row = await super().get_by_id(platform_id)
        if row is None:
            return
        row.connection_status = status.value
        await self.update(row)
