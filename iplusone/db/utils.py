"""
Database utility functions.

Timestamp normalisation and dialect-aware INSERT construction.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def to_storage(value: datetime) -> datetime:
    """Aware (or local naive) datetime -> naive UTC for storage."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime | None) -> datetime | None:
    """Naive UTC from storage -> aware UTC."""
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def upsert_insert(session: Session, table):
    """
    INSERT construct supporting ``on_conflict_do_*`` for the session's dialect.

    Both SQLite and PostgreSQL expose the same conflict API, so callers can
    express race-free insert-or-ignore and insert-or-increment statements.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite.insert(table)
    if dialect == "postgresql":
        return postgresql.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {dialect}")
