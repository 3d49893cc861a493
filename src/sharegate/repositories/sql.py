"""SQL repositories — grants, files, and users over an async session factory.

Each call runs in its own session: commit on success, rollback on
failure.  Returned rows are detached before commit, so they stay
readable whatever the factory's ``expire_on_commit`` is.  SQLAlchemy
errors never escape; they are re-raised as ``ConflictError`` so callers
only see the sharegate taxonomy.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from sharegate.exceptions import ConflictError
from sharegate.models import File, Grant, User

from .dialect import upsert_grant

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from sharegate.capabilities import Capabilities
    from sharegate.models import FileBase, GrantBase, UserBase

logger = logging.getLogger(__name__)


class _SessionScoped:
    """Shared session lifecycle for the SQL repositories."""

    def __init__(self, session_factory: Callable[..., AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ConflictError(f"Store rejected the change: {e.orig}") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning("Store operation failed", exc_info=True)
            raise ConflictError(f"Store operation failed: {e}") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


class SQLGrantRepository(_SessionScoped):
    """Grant CRUD with a dialect-aware atomic upsert.

    Constructor receives the concrete grant model so callers can use
    custom SQLModel subclasses with different table names.
    """

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        *,
        dialect: str = "sqlite",
        grant_model: type[GrantBase] | None = None,
        schema: str | None = None,
    ) -> None:
        super().__init__(session_factory)
        self._dialect = dialect
        self._grant_model: type[GrantBase] = grant_model or Grant
        self._schema = schema

    async def get(self, file_id: int, user_id: int) -> GrantBase | None:
        model = self._grant_model
        async with self._session() as session:
            result = await session.execute(
                select(model).where(
                    model.file_id == file_id,
                    model.user_id == user_id,
                )
            )
            grant = result.scalar_one_or_none()
            session.expunge_all()
            return grant

    async def list(self, file_id: int) -> list[GrantBase]:
        model = self._grant_model
        async with self._session() as session:
            result = await session.execute(select(model).where(model.file_id == file_id))
            grants = list(result.scalars().all())
            session.expunge_all()
            return grants

    async def upsert(
        self,
        file_id: int,
        user_id: int,
        capabilities: Capabilities,
    ) -> GrantBase:
        """Insert or replace in a single statement, then read the row back."""
        model = self._grant_model
        async with self._session() as session:
            await upsert_grant(
                session,
                self._dialect,
                model,
                file_id,
                user_id,
                capabilities,
                schema=self._schema,
            )
            result = await session.execute(
                select(model).where(
                    model.file_id == file_id,
                    model.user_id == user_id,
                )
            )
            grant = result.scalar_one()
            session.expunge_all()
            return grant

    async def delete(self, file_id: int, user_id: int) -> bool:
        """Remove the row in one statement.  Only one concurrent caller sees True."""
        model = self._grant_model
        async with self._session() as session:
            result = await session.execute(
                delete(model).where(
                    model.file_id == file_id,
                    model.user_id == user_id,
                )
            )
            return result.rowcount > 0  # type: ignore[attr-defined]


class SQLFileRepository(_SessionScoped):
    """Read-only file lookup."""

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        *,
        file_model: type[FileBase] | None = None,
    ) -> None:
        super().__init__(session_factory)
        self._file_model: type[FileBase] = file_model or File

    async def get(self, file_id: int) -> FileBase | None:
        async with self._session() as session:
            file = await session.get(self._file_model, file_id)
            session.expunge_all()
            return file


class SQLUserRepository(_SessionScoped):
    """Read-only user lookup."""

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        *,
        user_model: type[UserBase] | None = None,
    ) -> None:
        super().__init__(session_factory)
        self._user_model: type[UserBase] = user_model or User

    async def get(self, user_id: int) -> UserBase | None:
        async with self._session() as session:
            user = await session.get(self._user_model, user_id)
            session.expunge_all()
            return user
