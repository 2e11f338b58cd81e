"""LinkedIn profile ORM model: identity captured at a user's LinkedIn sign-in."""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import OrganizationScopedModel


class LinkedInProfile(OrganizationScopedModel, Base):
    """One profile per (organization, user). Table: linkedin_profiles."""

    __tablename__ = "linkedin_profiles"

    user_id: Mapped[str] = mapped_column(String, nullable=False)
    linkedin_id: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    given_name: Mapped[str | None] = mapped_column(String, nullable=True)
    family_name: Mapped[str | None] = mapped_column(String, nullable=True)
    picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_linkedin_profile_org_user"),
    )
