"""Database-agnostic type definitions for SQLAlchemy models.

These types work with both SQLite (local/dev) and PostgreSQL.
"""
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

# Stored natively on PostgreSQL, as a 32-char hex string on SQLite
UUIDType = PG_UUID
