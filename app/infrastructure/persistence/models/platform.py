"""Platform and platform credential ORM models."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import (
    ConnectionStatus,
    CredentialStatus,
    PlatformName,
    PrincipalType,
)
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationScopedModel,
    TimestampMixin,
)


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Platform(OrganizationScopedModel, Base):
    """Platform an organization integrates with. Table: platforms."""

    __tablename__ = "platforms"

    name: Mapped[str] = mapped_column(String, nullable=False)
    connection_status: Mapped[str] = mapped_column(
        String, nullable=False, default=ConnectionStatus.DISCONNECTED.value
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_platform_org_name"),
        CheckConstraint(_in_check("name", PlatformName.values()), name="platform_name_check"),
        CheckConstraint(
            _in_check("connection_status", ConnectionStatus.values()),
            name="platform_connection_status_check",
        ),
    )


class PlatformCredential(CuidMixin, TimestampMixin, Base):
    """Runtime OAuth grant per (platform, principal). Table: platform_credentials.

    Tokens are Secret Codec envelopes. subject_key is "" for organization-level
    grants so the unique key holds without NULL semantics.
    """

    __tablename__ = "platform_credentials"

    platform_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("platforms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    principal_type: Mapped[str] = mapped_column(String, nullable=False)
    subject_id: Mapped[str | None] = mapped_column(String, nullable=True)
    subject_key: Mapped[str] = mapped_column(String, nullable=False, default="")
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scopes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=CredentialStatus.ACTIVE.value
    )

    __table_args__ = (
        UniqueConstraint(
            "platform_id",
            "principal_type",
            "subject_key",
            name="uq_platform_credential_principal",
        ),
        CheckConstraint(
            _in_check("principal_type", PrincipalType.values()),
            name="platform_credential_principal_type_check",
        ),
        CheckConstraint(
            _in_check("status", CredentialStatus.values()),
            name="platform_credential_status_check",
        ),
    )
