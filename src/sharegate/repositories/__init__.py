"""Repository implementations — SQL (async SQLAlchemy) and in-memory."""

from sharegate.repositories.dialect import enable_sqlite_foreign_keys, get_dialect
from sharegate.repositories.memory import (
    InMemoryFileRepository,
    InMemoryGrantRepository,
    InMemoryUserRepository,
)
from sharegate.repositories.sql import (
    SQLFileRepository,
    SQLGrantRepository,
    SQLUserRepository,
)

__all__ = [
    "InMemoryFileRepository",
    "InMemoryGrantRepository",
    "InMemoryUserRepository",
    "SQLFileRepository",
    "SQLGrantRepository",
    "SQLUserRepository",
    "enable_sqlite_foreign_keys",
    "get_dialect",
]
