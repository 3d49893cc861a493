"""File model — uploaded file metadata and its owner.

Bytes live with the storage collaborator; this table only carries the
identity and ``owner_id`` the access checks need.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class FileBase(SQLModel):
    """Base fields for an uploaded file. Subclass with ``table=True`` for a concrete table."""

    id: int | None = Field(default=None, primary_key=True)
    name: str
    path: str = Field(default="")
    size_bytes: int = Field(default=0)
    mime_type: str = Field(default="application/octet-stream")
    owner_id: int = Field(foreign_key="sharegate_users.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class File(FileBase, table=True):
    """Default file table — ``sharegate_files``."""

    __tablename__ = "sharegate_files"
