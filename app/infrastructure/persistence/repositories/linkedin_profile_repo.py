"""LinkedIn profile repository: one stored identity per (organization, user)."""

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.connection import StoredProfile
from app.application.dtos.provider import ProviderProfile
from app.infrastructure.persistence.models.linkedin_profile import LinkedInProfile
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.generators import generate_cuid


def _profile_to_stored(p: LinkedInProfile) -> StoredProfile:
    return StoredProfile(
        organization_id=p.organization_id,
        user_id=p.user_id,
        profile=ProviderProfile(
            provider_user_id=p.linkedin_id,
            email=p.email,
            name=p.name,
            given_name=p.given_name,
            family_name=p.family_name,
            picture_url=p.picture_url,
        ),
        updated_at=p.updated_at,
    )


def _key(organization_id: str, user_id: str):
    return and_(
        LinkedInProfile.organization_id == organization_id,
        LinkedInProfile.user_id == user_id,
    )


class LinkedInProfileRepository(BaseRepository[LinkedInProfile]):
    """Profiles captured at sign-in; upsert is INSERT .. ON CONFLICT on (organization, user)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LinkedInProfile)

    async def upsert(
        self, organization_id: str, user_id: str, profile: ProviderProfile
    ) -> StoredProfile:
        values = {
            "linkedin_id": profile.provider_user_id,
            "email": profile.email,
            "name": profile.name,
            "given_name": profile.given_name,
            "family_name": profile.family_name,
            "picture_url": profile.picture_url,
        }
        stmt = pg_insert(LinkedInProfile).values(
            id=generate_cuid(),
            organization_id=organization_id,
            user_id=user_id,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_linkedin_profile_org_user",
            set_={**values, "updated_at": func.now()},
        ).returning(LinkedInProfile)
        result = await self.db.execute(
            select(LinkedInProfile)
            .from_statement(stmt)
            .execution_options(populate_existing=True)
        )
        return _profile_to_stored(result.scalar_one())

    async def get(self, organization_id: str, user_id: str) -> StoredProfile | None:
        result = await self.db.execute(
            select(LinkedInProfile).where(_key(organization_id, user_id))
        )
        row = result.scalar_one_or_none()
        return _profile_to_stored(row) if row else None

    async def delete(self, organization_id: str, user_id: str) -> bool:  # type: ignore[override]
        result = await self.db.execute(
            delete(LinkedInProfile).where(_key(organization_id, user_id))
        )
        return bool(result.rowcount)
