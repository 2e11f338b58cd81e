"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, OrganizationMixin, TimestampMixin and the combined
OrganizationScopedModel.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class OrganizationMixin:
    """Mixin for organization-owned rows. Provides organization_id FK with CASCADE delete."""

    @declared_attr
    def organization_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class OrganizationScopedModel(CuidMixin, OrganizationMixin, TimestampMixin):
    """Combined mixin: CUID + organization_id + created_at/updated_at."""

    __abstract__ = True
