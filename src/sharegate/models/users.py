"""User model — identity plus the admin flag.

Users are owned by the authentication layer; the sharing core only
reads them.  Provides ``UserBase`` (non-table) and ``User`` (concrete table).
"""

from __future__ import annotations

from sqlmodel import Field, SQLModel


class UserBase(SQLModel):
    """Base fields for a user record. Subclass with ``table=True`` for a concrete table."""

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    is_admin: bool = Field(default=False)


class User(UserBase, table=True):
    """Default user table — ``sharegate_users``."""

    __tablename__ = "sharegate_users"
