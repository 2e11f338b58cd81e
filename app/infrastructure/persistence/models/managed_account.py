"""Managed account cache and dependent resource ORM models."""

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationScopedModel,
    TimestampMixin,
)


class ManagedAccount(OrganizationScopedModel, Base):
    """Google manager customer or LinkedIn page. Table: managed_accounts."""

    __tablename__ = "managed_accounts"

    platform_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("platforms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_account_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    urn: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    currency_code: Mapped[str | None] = mapped_column(String, nullable=True)
    time_zone: Mapped[str | None] = mapped_column(String, nullable=True)
    vanity_name: Mapped[str | None] = mapped_column(String, nullable=True)
    website_url: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_urn: Mapped[str | None] = mapped_column(String, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_photo_urn: Mapped[str | None] = mapped_column(String, nullable=True)
    cover_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    staff_count_range: Mapped[str | None] = mapped_column(String, nullable=True)
    specialties: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    ad_accounts: Mapped[list["AdAccount"]] = relationship(
        back_populates="managed_account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="AdAccount.external_id",
    )

    __table_args__ = (
        UniqueConstraint(
            "organization_id",
            "external_account_id",
            name="uq_managed_account_org_external",
        ),
    )


class AdAccount(CuidMixin, TimestampMixin, Base):
    """Google client account or LinkedIn sponsored account. Table: ad_accounts."""

    __tablename__ = "ad_accounts"

    managed_account_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("managed_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    urn: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    currency_code: Mapped[str | None] = mapped_column(String, nullable=True)
    time_zone: Mapped[str | None] = mapped_column(String, nullable=True)
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    managed_account: Mapped[ManagedAccount] = relationship(back_populates="ad_accounts")
    campaign_groups: Mapped[list["CampaignGroup"]] = relationship(
        back_populates="ad_account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="CampaignGroup.external_id",
    )

    __table_args__ = (
        UniqueConstraint(
            "managed_account_id", "external_id", name="uq_ad_account_managed_external"
        ),
    )


class CampaignGroup(CuidMixin, TimestampMixin, Base):
    """LinkedIn campaign group. Table: campaign_groups."""

    __tablename__ = "campaign_groups"

    ad_account_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("ad_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_id: Mapped[str] = mapped_column(String, nullable=False)
    urn: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    account_urn: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    objective_type: Mapped[str | None] = mapped_column(String, nullable=True)
    test: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    backfilled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    run_schedule: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    total_budget: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    serving_statuses: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    ad_account: Mapped[AdAccount] = relationship(back_populates="campaign_groups")

    __table_args__ = (
        UniqueConstraint(
            "ad_account_id", "external_id", name="uq_campaign_group_account_external"
        ),
    )
