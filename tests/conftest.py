"""Shared fixtures for sharegate tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import Session, SQLModel, create_engine

from sharegate.models import File, User
from sharegate.repositories import (
    InMemoryFileRepository,
    InMemoryGrantRepository,
    InMemoryUserRepository,
    SQLFileRepository,
    SQLGrantRepository,
    SQLUserRepository,
    enable_sqlite_foreign_keys,
)
from sharegate.service import SharingService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine

    from sharegate.protocols import FileRepository, GrantRepository, UserRepository


@dataclass
class World:
    """Seeded users and files.

    alice owns ``report``; bob owns ``photo``; carol and dave own nothing;
    root is an admin.
    """

    alice: User
    bob: User
    carol: User
    dave: User
    root: User
    report: File
    photo: File
    notes: File


@dataclass
class Backend:
    """A repository set plus hooks that play the external collaborator."""

    name: str
    files: FileRepository
    users: UserRepository
    grants: GrantRepository
    world: World
    delete_file: Callable[[int], Awaitable[None]]
    delete_user: Callable[[int], Awaitable[None]]


def _people() -> list[User]:
    return [
        User(username="alice"),
        User(username="bob"),
        User(username="carol"),
        User(username="dave"),
        User(username="root", is_admin=True),
    ]


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite engine with foreign keys on and all tables created."""
    eng = create_engine("sqlite://", echo=False)
    enable_sqlite_foreign_keys(eng)
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """SQLModel session bound to the in-memory engine, rolled back after each test."""
    with Session(engine) as s:
        yield s
        s.rollback()


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with foreign keys on and all tables created."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    enable_sqlite_foreign_keys(eng)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


async def seed_sql(factory: async_sessionmaker[AsyncSession]) -> World:
    async with factory() as session:
        alice, bob, carol, dave, root = _people()
        session.add_all([alice, bob, carol, dave, root])
        await session.flush()
        report = File(name="report.txt", mime_type="text/plain", owner_id=alice.id)
        photo = File(name="cat.png", mime_type="image/png", owner_id=bob.id)
        notes = File(name="notes.md", mime_type="text/markdown", owner_id=alice.id)
        session.add_all([report, photo, notes])
        await session.commit()
    return World(alice, bob, carol, dave, root, report, photo, notes)


@pytest.fixture
async def world(session_factory: async_sessionmaker[AsyncSession]) -> World:
    """Users and files seeded into the in-memory SQLite database."""
    return await seed_sql(session_factory)


def memory_backend() -> Backend:
    grants = InMemoryGrantRepository()
    users = InMemoryUserRepository(grants=grants)
    files = InMemoryFileRepository(grants=grants)
    alice, bob, carol, dave, root = (users.add(u) for u in _people())
    report = files.add(File(name="report.txt", mime_type="text/plain", owner_id=alice.id))
    photo = files.add(File(name="cat.png", mime_type="image/png", owner_id=bob.id))
    notes = files.add(File(name="notes.md", mime_type="text/markdown", owner_id=alice.id))

    async def delete_file(file_id: int) -> None:
        files.remove(file_id)

    async def delete_user(user_id: int) -> None:
        users.remove(user_id)

    return Backend(
        name="memory",
        files=files,
        users=users,
        grants=grants,
        world=World(alice, bob, carol, dave, root, report, photo, notes),
        delete_file=delete_file,
        delete_user=delete_user,
    )


@pytest.fixture(params=["sql", "memory"])
async def backend(
    request: pytest.FixtureRequest,
    session_factory: async_sessionmaker[AsyncSession],
) -> Backend:
    """Every service-level test runs against both repository families."""
    if request.param == "memory":
        return memory_backend()

    seeded = await seed_sql(session_factory)

    async def delete_row(model: type, row_id: int) -> None:
        async with session_factory() as session:
            await session.execute(delete(model).where(model.id == row_id))  # type: ignore[attr-defined]
            await session.commit()

    return Backend(
        name="sql",
        files=SQLFileRepository(session_factory),
        users=SQLUserRepository(session_factory),
        grants=SQLGrantRepository(session_factory),
        world=seeded,
        delete_file=lambda file_id: delete_row(File, file_id),
        delete_user=lambda user_id: delete_row(User, user_id),
    )


@pytest.fixture
async def service(backend: Backend) -> AsyncIterator[SharingService]:
    svc = SharingService(backend.files, backend.users, backend.grants)
    yield svc
    await svc.close()
