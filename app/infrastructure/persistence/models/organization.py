"""Organization ORM model. Root entity; holds encrypted platform app credentials."""

from typing import Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Organization(CuidMixin, TimestampMixin, Base):
    """Organization. Table: organizations.

    app_credentials maps platform name to {field: Secret Codec envelope}.
    linkedin_sign_in_enabled is NULL until an admin sets it (treated as enabled).
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    app_credentials: Mapped[dict[str, dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    linkedin_sign_in_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
