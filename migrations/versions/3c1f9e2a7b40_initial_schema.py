"""initial_schema

Create the user directory for PlayNext:
- Directory users (Steam-linked or email accounts, library aggregates)
- Unique SteamID64 per user, enforced by the database

Revision ID: 3c1f9e2a7b40
Revises:
Create Date: 2026-10-19 10:12:44.381920

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f9e2a7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Enable required extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # DIRECTORY_USERS table
    # ========================================================================
    op.create_table(
        "directory_users",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(17), nullable=True),  # SteamID64
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("secret_hash", sa.Text(), nullable=True),
        sa.Column("total_games", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_playtime", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_id", name="uq_directory_users_external_id"),
        sa.CheckConstraint(
            "external_id IS NULL OR external_id ~ '^[0-9]{17}$'",
            name="ck_directory_users_external_id_format",
        ),
    )
    op.create_index("idx_directory_users_email", "directory_users", ["email"])

    # Trigger function to update updated_at timestamp
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    op.execute("""
        CREATE TRIGGER update_directory_users_updated_at
        BEFORE UPDATE ON directory_users
        FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        "DROP TRIGGER IF EXISTS update_directory_users_updated_at ON directory_users"
    )
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    op.drop_index("idx_directory_users_email", table_name="directory_users")
    op.drop_table("directory_users")
