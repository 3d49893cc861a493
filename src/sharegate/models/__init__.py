"""SQLModel database models for sharegate."""

from sharegate.models.files import File, FileBase
from sharegate.models.grants import Grant, GrantBase
from sharegate.models.users import User, UserBase

__all__ = [
    "File",
    "FileBase",
    "Grant",
    "GrantBase",
    "User",
    "UserBase",
]
