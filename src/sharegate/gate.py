"""AccessGate — the enforcement point for every file-scoped operation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .authorization import can_manage_grants, effective_capabilities, has_override
from .capabilities import Capabilities, Capability
from .exceptions import AccessDeniedError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import FileBase, GrantBase, UserBase
    from .protocols import FileRepository, GrantRepository

logger = logging.getLogger(__name__)


class AccessGate:
    """Loads the file and the caller's grant, then asks the authorization engine.

    Single-file operations reject with ``NotFoundError`` or
    ``AccessDeniedError``.  Listing never rejects: ``filter_readable``
    silently drops what the caller may not see.
    """

    def __init__(self, files: FileRepository, grants: GrantRepository) -> None:
        self._files = files
        self._grants = grants

    async def _load(self, file_id: int) -> FileBase:
        file = await self._files.get(file_id)
        if file is None:
            raise NotFoundError(f"File not found: {file_id}")
        return file

    async def _grant_for(self, user: UserBase, file: FileBase) -> GrantBase | None:
        # Owners and admins never need the round trip
        if has_override(user, file) or user.id is None or file.id is None:
            return None
        return await self._grants.get(file.id, user.id)

    async def capabilities(self, user: UserBase, file_id: int) -> Capabilities:
        """Effective capabilities of *user* on *file_id*.  Raises ``NotFoundError``."""
        file = await self._load(file_id)
        return effective_capabilities(user, file, await self._grant_for(user, file))

    async def authorize(
        self,
        user: UserBase,
        file_id: int,
        required: Capability = Capability.READ,
    ) -> FileBase:
        """Return the file if *user* holds *required* on it."""
        file = await self._load(file_id)
        caps = effective_capabilities(user, file, await self._grant_for(user, file))
        if not caps.allows(required):
            logger.debug("Denied %s on file %s to user %s", required.value, file_id, user.id)
            raise AccessDeniedError(
                f"Access denied: user {user.id} lacks {required.value!r} on file {file_id}"
            )
        return file

    async def filter_readable(
        self,
        user: UserBase,
        files: Iterable[FileBase],
    ) -> list[FileBase]:
        """Keep only the files *user* may read, in their original order."""
        readable: list[FileBase] = []
        for f in files:
            if f.id is None:
                continue
            try:
                await self.authorize(user, f.id, Capability.READ)
            except (AccessDeniedError, NotFoundError):
                continue
            readable.append(f)
        return readable

    async def authorize_grant_management(
        self,
        user: UserBase,
        file_id: int,
        acting_on_user_id: int | None = None,
    ) -> FileBase:
        """Return the file if *user* may manage grants on it.

        Acting on one's own grant is refused.
        """
        file = await self._load(file_id)
        if acting_on_user_id is not None and acting_on_user_id == user.id:
            raise AccessDeniedError(f"User {user.id} cannot manage their own grant")
        if not can_manage_grants(user, file, await self._grant_for(user, file)):
            logger.debug("Denied grant management on file %s to user %s", file_id, user.id)
            raise AccessDeniedError(
                f"Access denied: user {user.id} may not share file {file_id}"
            )
        return file
