"""Effective-capability resolution.

Pure functions over ``(user, file, grant)``.  Nothing here touches a
store, so every combination can be tested without a database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .capabilities import Capabilities

if TYPE_CHECKING:
    from sharegate.models import FileBase, GrantBase, UserBase


def has_override(user: UserBase, file: FileBase) -> bool:
    """True when *user* is an admin or owns *file*."""
    return bool(user.is_admin) or user.id == file.owner_id


def effective_capabilities(
    user: UserBase,
    file: FileBase,
    grant: GrantBase | None = None,
) -> Capabilities:
    """Resolve what *user* may do with *file*.

    Admins and the owner get everything; any stored grant is ignored
    for them.  Otherwise the grant's flags apply verbatim, and with no
    grant the user gets nothing.
    """
    if has_override(user, file):
        return Capabilities.ALL
    if grant is not None:
        return Capabilities.of(grant)
    return Capabilities.NONE


def can_manage_grants(
    user: UserBase,
    file: FileBase,
    grant: GrantBase | None = None,
) -> bool:
    """True if *user* may create, update, or delete other users' grants on *file*."""
    if has_override(user, file):
        return True
    return grant is not None and bool(grant.can_share)
