"""SharingService — the public surface of the sharing core.

Wires the access gate, the grant repository, and the change notifier.
Every grant mutation goes gate → repository commit → notify, in that
order; notification can never fail or delay the mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from .capabilities import Capabilities, Capability
from .config import ShareConfig
from .exceptions import AccessDeniedError, NotFoundError, ValidationError
from .gate import AccessGate
from .models import File, Grant, User
from .notifier import ChangeNotifier
from .repositories.dialect import enable_sqlite_foreign_keys, get_dialect
from .repositories.sql import SQLFileRepository, SQLGrantRepository, SQLUserRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncEngine

    from .models import FileBase, GrantBase, UserBase
    from .protocols import Channel, FileRepository, GrantRepository, UserRepository

logger = logging.getLogger(__name__)


def _coerce_capabilities(value: Capabilities | Mapping[str, Any] | None) -> Capabilities:
    if value is None:
        return Capabilities()
    if isinstance(value, Capabilities):
        for name, flag in value.as_dict().items():
            if not isinstance(flag, bool):
                raise ValidationError(f"Capability {name!r} must be a boolean")
        return value
    if isinstance(value, Mapping):
        return Capabilities.from_mapping(value)
    raise ValidationError(f"Unsupported capabilities value: {type(value).__name__}")


class SharingService:
    """Async facade over authorization, grant lifecycle, and change events.

    Construct from repositories directly, or from an engine::

        engine = create_async_engine("sqlite+aiosqlite:///app.db")
        service = await SharingService.from_engine(engine)

        grant = await service.mutate_grant(alice, file_id, bob.id, {"canRead": True})
        if await service.authorize_read(bob, file_id):
            ...
    """

    def __init__(
        self,
        files: FileRepository,
        users: UserRepository,
        grants: GrantRepository,
        *,
        notifier: ChangeNotifier | None = None,
        config: ShareConfig | None = None,
    ) -> None:
        self._config = config or ShareConfig()
        self._files = files
        self._users = users
        self._grants = grants
        self._gate = AccessGate(files, grants)
        self._notifier = notifier or ChangeNotifier(self._config)

    @classmethod
    async def from_engine(
        cls,
        engine: AsyncEngine,
        *,
        config: ShareConfig | None = None,
        create_tables: bool = True,
        db_schema: str | None = None,
    ) -> SharingService:
        """Build SQL repositories over *engine*, creating the tables if asked.

        On SQLite, foreign keys are switched on for new connections so
        grants cascade with their file and user.
        """
        enable_sqlite_foreign_keys(engine)
        if create_tables:
            tables = [User.__table__, File.__table__, Grant.__table__]  # type: ignore[attr-defined]
            async with engine.begin() as conn:
                await conn.run_sync(
                    lambda c: SQLModel.metadata.create_all(c, tables=tables, checkfirst=True)
                )

        sf = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        return cls(
            SQLFileRepository(sf),
            SQLUserRepository(sf),
            SQLGrantRepository(sf, dialect=get_dialect(engine), schema=db_schema),
            config=config,
        )

    # ------------------------------------------------------------------
    # Access checks
    # ------------------------------------------------------------------

    async def _allowed(self, user: UserBase, file_id: int, required: Capability) -> bool:
        try:
            await self._gate.authorize(user, file_id, required)
        except (AccessDeniedError, NotFoundError):
            return False
        return True

    async def authorize(
        self,
        user: UserBase,
        file_id: int,
        required: Capability = Capability.READ,
    ) -> FileBase:
        """Return the file or raise ``NotFoundError`` / ``AccessDeniedError``."""
        return await self._gate.authorize(user, file_id, required)

    async def authorize_read(self, user: UserBase, file_id: int) -> bool:
        return await self._allowed(user, file_id, Capability.READ)

    async def authorize_write(self, user: UserBase, file_id: int) -> bool:
        return await self._allowed(user, file_id, Capability.WRITE)

    async def authorize_share(self, user: UserBase, file_id: int) -> bool:
        return await self._allowed(user, file_id, Capability.SHARE)

    async def authorize_grant_management(self, user: UserBase, file_id: int) -> bool:
        try:
            await self._gate.authorize_grant_management(user, file_id)
        except (AccessDeniedError, NotFoundError):
            return False
        return True

    async def filter_readable(
        self,
        user: UserBase,
        files: Iterable[FileBase],
    ) -> list[FileBase]:
        """Drop the files *user* cannot read.  Order is preserved."""
        return await self._gate.filter_readable(user, files)

    async def get_effective_capabilities(self, user: UserBase, file_id: int) -> Capabilities:
        """Resolved read/write/share for *user* on *file_id*.  Raises ``NotFoundError``."""
        return await self._gate.capabilities(user, file_id)

    # ------------------------------------------------------------------
    # Grant lifecycle
    # ------------------------------------------------------------------

    async def list_grants(self, actor: UserBase, file_id: int) -> list[GrantBase]:
        """All grants on *file_id*.  The actor needs read access to the file."""
        await self._gate.authorize(actor, file_id, Capability.READ)
        return await self._grants.list(file_id)

    async def mutate_grant(
        self,
        actor: UserBase,
        file_id: int,
        target_user_id: int,
        capabilities: Capabilities | Mapping[str, Any] | None = None,
    ) -> GrantBase:
        """Create or replace *target_user_id*'s grant on *file_id*.

        *capabilities* is the complete desired tuple; omitted flags take
        the creation defaults (read only).  Raises ``ValidationError``,
        ``NotFoundError``, ``AccessDeniedError`` or ``ConflictError``.
        """
        caps = _coerce_capabilities(capabilities)
        file = await self._gate.authorize_grant_management(actor, file_id, target_user_id)

        target = await self._users.get(target_user_id)
        if target is None:
            raise NotFoundError(f"User not found: {target_user_id}")
        if target.id == file.owner_id:
            raise ValidationError(f"User {target_user_id} owns file {file_id}; grants do not apply")
        if target.is_admin:
            raise ValidationError(f"User {target_user_id} is an admin; grants do not apply")

        grant = await self._grants.upsert(file_id, target_user_id, caps)
        logger.info(
            "Grant on file %s for user %s set to %s by user %s",
            file_id,
            target_user_id,
            caps.as_dict(),
            actor.id,
        )
        self._notifier.notify(file_id)
        return grant

    async def revoke_grant(
        self,
        actor: UserBase,
        file_id: int,
        target_user_id: int,
    ) -> None:
        """Delete *target_user_id*'s grant on *file_id*.

        Raises ``NotFoundError`` when the file or the grant does not exist.
        """
        await self._gate.authorize_grant_management(actor, file_id, target_user_id)
        removed = await self._grants.delete(file_id, target_user_id)
        if not removed:
            raise NotFoundError(f"No grant on file {file_id} for user {target_user_id}")
        logger.info(
            "Grant on file %s for user %s revoked by user %s",
            file_id,
            target_user_id,
            actor.id,
        )
        self._notifier.notify(file_id)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, channel: Channel) -> None:
        self._notifier.subscribe(channel)

    def unsubscribe(self, channel: Channel) -> bool:
        return self._notifier.unsubscribe(channel)

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def config(self) -> ShareConfig:
        return self._config

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Stop event delivery.  Repositories are owned by the caller."""
        await self._notifier.close()

    async def __aenter__(self) -> SharingService:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
