"""LinkedIn profiles and organization sign-in preference

Revision ID: 8b2d4e6f1a35
Revises: 3f1c2a9b7d10
Create Date: 2026-10-18 16:42:07.518904

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b2d4e6f1a35"
down_revision: Union[str, Sequence[str], None] = "3f1c2a9b7d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add linkedin_profiles and organizations.linkedin_sign_in_enabled."""
    op.add_column(
        "organizations",
        sa.Column("linkedin_sign_in_enabled", sa.Boolean(), nullable=True),
    )

    op.create_table(
        "linkedin_profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("linkedin_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("given_name", sa.String(), nullable=True),
        sa.Column("family_name", sa.String(), nullable=True),
        sa.Column("picture_url", sa.Text(), nullable=True),
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
        sa.ForeignKeyConstraint(
            ["organization_id"], ["organizations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id", "user_id", name="uq_linkedin_profile_org_user"
        ),
    )
    op.create_index(
        op.f("ix_linkedin_profiles_organization_id"),
        "linkedin_profiles",
        ["organization_id"],
    )


def downgrade() -> None:
    """Drop linkedin_profiles and the sign-in column."""
    op.drop_index(
        op.f("ix_linkedin_profiles_organization_id"), table_name="linkedin_profiles"
    )
    op.drop_table("linkedin_profiles")
    op.drop_column("organizations", "linkedin_sign_in_enabled")
