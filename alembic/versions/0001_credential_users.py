"""Create users table for credential storage."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_credential_users"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create users table with unique username constraint."""

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column(
            "registered_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("username", name="uq_users_username"),
        # Minimum length is counted in UTF-16 units by the service; SQL length() cannot.
        sa.CheckConstraint("length(username) > 0", name="ck_users_username_not_empty"),
    )


def downgrade() -> None:
    """Drop users table."""

    op.drop_table("users")
