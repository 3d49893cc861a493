"""Collaborator protocols — runtime-checkable interfaces.

The sharing core depends on these and nothing more.  SQL and in-memory
implementations live in ``sharegate.repositories``; callers may plug in
their own as long as they honour the same contracts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .capabilities import Capabilities
    from .models import FileBase, GrantBase, UserBase


@runtime_checkable
class FileRepository(Protocol):
    """Read access to uploaded files."""

    async def get(self, file_id: int) -> FileBase | None: ...


@runtime_checkable
class UserRepository(Protocol):
    """Read access to users.  Returned users must expose ``is_admin``."""

    async def get(self, user_id: int) -> UserBase | None: ...


@runtime_checkable
class GrantRepository(Protocol):
    """Durable CRUD over grants, one row per ``(file_id, user_id)``.

    Every mutation is transactional with respect to the single row it
    touches.  A successful return is a durable commit.
    """

    async def get(self, file_id: int, user_id: int) -> GrantBase | None: ...

    async def list(self, file_id: int) -> list[GrantBase]:
        """All grants on *file_id*, in no particular order."""
        ...

    async def upsert(
        self,
        file_id: int,
        user_id: int,
        capabilities: Capabilities,
    ) -> GrantBase:
        """Atomically create or replace the grant for the pair.

        Concurrent calls for the same pair must leave exactly one row.
        The store owns this guarantee, not the caller.
        """
        ...

    async def delete(self, file_id: int, user_id: int) -> bool:
        """Remove the grant.  No-op (returns False) if absent."""
        ...


@runtime_checkable
class Channel(Protocol):
    """A live subscriber handle that accepts change events."""

    async def send(self, payload: dict[str, Any]) -> None: ...
