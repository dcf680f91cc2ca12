"""SQLAlchemy table definitions for PlayNext.

These table definitions match the schema defined in Alembic migrations.
"""

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# DIRECTORY USERS TABLE
# ============================================================================
directory_users_table = Table(
    "directory_users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("external_id", String(17), nullable=True),  # SteamID64
    Column("display_name", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("email", String(255), nullable=True),  # Non-Steam sign-in
    Column("secret_hash", Text, nullable=True),  # argon2 hash of directory secret
    Column("total_games", Integer, nullable=False, server_default="0"),
    Column("total_playtime", Integer, nullable=False, server_default="0"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("external_id", name="uq_directory_users_external_id"),
)

Index("idx_directory_users_email", directory_users_table.c.email)
