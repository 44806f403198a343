"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and the timestamp mixin shared by
tracked records.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalise a stored timestamp to aware UTC.

    Backends without timezone support (SQLite) hand back naive values that
    were written as UTC.

    Args:
        value: Datetime read from the database

    Returns:
        datetime: Timezone-aware UTC datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base; its metadata drives create_schema()."""


class TimestampMixin:
    """
    Mixin providing timestamp tracking.

    created_at is set once on row creation and never changes.
    updated_at has no onupdate hook; every update writes it explicitly
    (see JobCRUD.guarded_update).

    Attributes:
        created_at: Row creation timestamp (UTC, immutable)
        updated_at: Last modification timestamp (UTC, non-decreasing)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
