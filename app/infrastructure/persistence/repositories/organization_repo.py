"""Organization repository: encrypted app credentials per platform and LinkedIn sign-in preference."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import PlatformName
from app.infrastructure.persistence.models.organization import Organization
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class OrganizationRepository(BaseRepository[Organization]):
    """Stores {platform: {field: envelope}} on the organization row."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Organization)

    async def get_app_credentials(
        self, organization_id: str, platform: PlatformName
    ) -> dict[str, str] | None:
        organization = await self.get_by_id(organization_id)
        if organization is None:
            return None
        fields = (organization.app_credentials or {}).get(platform.value)
        return dict(fields) if fields else None

    async def set_app_credentials(
        self,
        organization_id: str,
        platform: PlatformName,
        encrypted_fields: dict[str, str],
    ) -> None:
        organization = await self.get_by_id(organization_id)
        if organization is None:
            logger.info("Creating organization %s on first credential save", organization_id)
            await self.create(
                Organization(
                    id=organization_id,
                    app_credentials={platform.value: dict(encrypted_fields)},
                )
            )
            return
        # Reassign so the JSON column is flagged dirty.
        credentials = dict(organization.app_credentials or {})
        credentials[platform.value] = dict(encrypted_fields)
        organization.app_credentials = credentials
        await self.update(organization)

    async def get_linkedin_sign_in_enabled(self, organization_id: str) -> bool | None:
        organization = await self.get_by_id(organization_id)
        if organization is None:
            return None
        return organization.linkedin_sign_in_enabled

    async def set_linkedin_sign_in_enabled(
        self, organization_id: str, enabled: bool
    ) -> None:
        organization = await self.get_by_id(organization_id)
        if organization is None:
            logger.info("Creating organization %s on first preference save", organization_id)
            await self.create(
                Organization(
                    id=organization_id,
                    app_credentials={},
                    linkedin_sign_in_enabled=enabled,
                )
            )
            return
        organization.linkedin_sign_in_enabled = enabled
        await self.update(organization)
