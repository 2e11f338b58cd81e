"""Initial schema: organizations, platforms, credentials, managed accounts

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-18 10:04:51.120332

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create connection schema."""
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column(
            "app_credentials",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "platforms",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "connection_status",
            sa.String(),
            nullable=False,
            server_default="disconnected",
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "name IN ('google_ads', 'linkedin')", name="platform_name_check"
        ),
        sa.CheckConstraint(
            "connection_status IN ('connected', 'disconnected')",
            name="platform_connection_status_check",
        ),
        sa.ForeignKeyConstraint(
            ["organization_id"], ["organizations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "name", name="uq_platform_org_name"),
    )
    op.create_index(
        op.f("ix_platforms_organization_id"), "platforms", ["organization_id"]
    )

    op.create_table(
        "platform_credentials",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("platform_id", sa.String(), nullable=False),
        sa.Column("principal_type", sa.String(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=True),
        sa.Column("subject_key", sa.String(), nullable=False, server_default=""),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scopes", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        *_timestamps(),
        sa.CheckConstraint(
            "principal_type IN ('organization', 'user')",
            name="platform_credential_principal_type_check",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'revoked')", name="platform_credential_status_check"
        ),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "platform_id",
            "principal_type",
            "subject_key",
            name="uq_platform_credential_principal",
        ),
    )
    op.create_index(
        op.f("ix_platform_credentials_platform_id"),
        "platform_credentials",
        ["platform_id"],
    )

    op.create_table(
        "managed_accounts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column("platform_id", sa.String(), nullable=False),
        sa.Column("external_account_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column("urn", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("currency_code", sa.String(), nullable=True),
        sa.Column("time_zone", sa.String(), nullable=True),
        sa.Column("vanity_name", sa.String(), nullable=True),
        sa.Column("website_url", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_urn", sa.String(), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("cover_photo_urn", sa.String(), nullable=True),
        sa.Column("cover_photo_url", sa.Text(), nullable=True),
        sa.Column("staff_count_range", sa.String(), nullable=True),
        sa.Column(
            "specialties", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("extra", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["organization_id"], ["organizations.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id",
            "external_account_id",
            name="uq_managed_account_org_external",
        ),
    )
    op.create_index(
        op.f("ix_managed_accounts_organization_id"),
        "managed_accounts",
        ["organization_id"],
    )
    op.create_index(
        op.f("ix_managed_accounts_platform_id"), "managed_accounts", ["platform_id"]
    )

    op.create_table(
        "ad_accounts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("managed_account_id", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("urn", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("currency_code", sa.String(), nullable=True),
        sa.Column("time_zone", sa.String(), nullable=True),
        sa.Column("extra", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["managed_account_id"], ["managed_accounts.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "managed_account_id", "external_id", name="uq_ad_account_managed_external"
        ),
    )
    op.create_index(
        op.f("ix_ad_accounts_managed_account_id"), "ad_accounts", ["managed_account_id"]
    )

    op.create_table(
        "campaign_groups",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("ad_account_id", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("urn", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("account_urn", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("objective_type", sa.String(), nullable=True),
        sa.Column("test", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("backfilled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("run_schedule", sa.JSON(), nullable=True),
        sa.Column("total_budget", sa.JSON(), nullable=True),
        sa.Column(
            "serving_statuses", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["ad_account_id"], ["ad_accounts.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "ad_account_id", "external_id", name="uq_campaign_group_account_external"
        ),
    )
    op.create_index(
        op.f("ix_campaign_groups_ad_account_id"), "campaign_groups", ["ad_account_id"]
    )


def downgrade() -> None:
    """Drop connection schema."""
    op.drop_table("campaign_groups")
    op.drop_table("ad_accounts")
    op.drop_table("managed_accounts")
    op.drop_table("platform_credentials")
    op.drop_table("platforms")
    op.drop_table("organizations")
