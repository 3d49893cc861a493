"""In-memory repositories for non-SQL deployments and tests.

Rows are never mutated after they are handed out: an upsert stores a
fresh ``Grant`` that keeps the original ``id`` and ``created_at``.
"""

from __future__ import annotations

import itertools
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sharegate.models import File, Grant, User

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sharegate.capabilities import Capabilities


class InMemoryGrantRepository:
    """Dict keyed by ``(file_id, user_id)``; the lock makes upsert atomic."""

    def __init__(self) -> None:
        self._grants: dict[tuple[int, int], Grant] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    async def get(self, file_id: int, user_id: int) -> Grant | None:
        with self._lock:
            return self._grants.get((file_id, user_id))

    async def list(self, file_id: int) -> list[Grant]:
        with self._lock:
            return [g for (fid, _), g in self._grants.items() if fid == file_id]

    async def upsert(
        self,
        file_id: int,
        user_id: int,
        capabilities: Capabilities,
    ) -> Grant:
        now = datetime.now(UTC)
        with self._lock:
            existing = self._grants.get((file_id, user_id))
            grant = Grant(
                id=existing.id if existing else next(self._ids),
                file_id=file_id,
                user_id=user_id,
                created_at=existing.created_at if existing else now,
                updated_at=now,
                **capabilities.as_dict(),
            )
            self._grants[(file_id, user_id)] = grant
            return grant

    async def delete(self, file_id: int, user_id: int) -> bool:
        with self._lock:
            return self._grants.pop((file_id, user_id), None) is not None

    def purge(self, *, file_id: int | None = None, user_id: int | None = None) -> int:
        """Drop every grant on *file_id* or held by *user_id*. Returns the count."""
        with self._lock:
            doomed = [
                key
                for key in self._grants
                if (file_id is not None and key[0] == file_id)
                or (user_id is not None and key[1] == user_id)
            ]
            for key in doomed:
                del self._grants[key]
            return len(doomed)

    def __len__(self) -> int:
        return len(self._grants)


class InMemoryFileRepository:
    """File lookup backed by a dict.

    ``remove`` cascades into *grants* when one is given, mirroring the
    ``ON DELETE CASCADE`` of the SQL schema.
    """

    def __init__(
        self,
        files: Iterable[File] = (),
        *,
        grants: InMemoryGrantRepository | None = None,
    ) -> None:
        self._files: dict[int, File] = {}
        self._grants = grants
        for f in files:
            self.add(f)

    def add(self, file: File) -> File:
        if file.id is None:
            file.id = max(self._files, default=0) + 1
        self._files[file.id] = file
        return file

    def remove(self, file_id: int) -> None:
        self._files.pop(file_id, None)
        if self._grants is not None:
            self._grants.purge(file_id=file_id)

    async def get(self, file_id: int) -> File | None:
        return self._files.get(file_id)


class InMemoryUserRepository:
    """User lookup backed by a dict.  ``remove`` cascades like the file repository."""

    def __init__(
        self,
        users: Iterable[User] = (),
        *,
        grants: InMemoryGrantRepository | None = None,
    ) -> None:
        self._users: dict[int, User] = {}
        self._grants = grants
        for u in users:
            self.add(u)

    def add(self, user: User) -> User:
        if user.id is None:
            user.id = max(self._users, default=0) + 1
        self._users[user.id] = user
        return user

    def remove(self, user_id: int) -> None:
        self._users.pop(user_id, None)
        if self._grants is not None:
            self._grants.purge(user_id=user_id)

    async def get(self, user_id: int) -> User | None:
        return self._users.get(user_id)
