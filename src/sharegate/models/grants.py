"""Grant model — per-user capabilities on one file.

At most one row exists per ``(file_id, user_id)``; the unique constraint
is what makes the repository upsert atomic.  Both foreign keys cascade,
so deleting a file or a user removes its grants.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class GrantBase(SQLModel):
    """Base fields for a grant record. Subclass with ``table=True`` for a concrete table."""

    id: int | None = Field(default=None, primary_key=True)
    file_id: int = Field(foreign_key="sharegate_files.id", ondelete="CASCADE", index=True)
    user_id: int = Field(foreign_key="sharegate_users.id", ondelete="CASCADE", index=True)
    can_read: bool = Field(default=True)
    can_write: bool = Field(default=False)
    can_share: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class Grant(GrantBase, table=True):
    """Default grant table — ``sharegate_grants``."""

    __tablename__ = "sharegate_grants"
    __table_args__ = (UniqueConstraint("file_id", "user_id", name="uq_grant_file_user"),)
