"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.types import JSON

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
# Unset provider ids are stored as NULL so the unique constraints ignore them.
users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("github_id", String(64), nullable=True),
    Column("github_username", String(255), nullable=True),
    Column("google_id", String(255), nullable=True),
    Column("google_email", String(320), nullable=True),
    Column("email", String(320), nullable=True),
    Column("emails", JSON, nullable=False),  # list[str], normalized
    Column("name", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("admin", Boolean, nullable=False, server_default=false()),
    Column("github_access_token", Text, nullable=True),  # encrypted
    Column("github_token_expires_at", DateTime(timezone=True), nullable=True),
    Column("google_access_token", Text, nullable=True),  # encrypted
    Column("google_token_expires_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    UniqueConstraint("github_id", name="uq_users_github_id"),
    UniqueConstraint("google_id", name="uq_users_google_id"),
)

Index("ix_users_email", users_table.c.email)


# ============================================================================
# WHITELIST TABLE
# ============================================================================
whitelist_table = Table(
    "whitelist_entries",
    metadata,
    Column("email", String(320), primary_key=True),  # normalized
    Column("created_at", DateTime(timezone=True), nullable=False),
)
