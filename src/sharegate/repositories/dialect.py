"""Dialect-aware SQL helpers — grant upsert and SQLite foreign keys."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, text

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from sharegate.capabilities import Capabilities

_CONFLICT_KEYS = ("file_id", "user_id")
_UPDATE_KEYS = ("can_read", "can_write", "can_share", "updated_at")


def get_dialect(engine: Engine | AsyncEngine) -> str:
    """Return 'sqlite', 'postgresql', or 'mssql'."""
    # AsyncEngine wraps a sync engine
    sync_engine = getattr(engine, "sync_engine", engine)
    name = sync_engine.dialect.name
    if name == "sqlite":
        return "sqlite"
    if name in ("postgresql", "postgres"):
        return "postgresql"
    if name in ("mssql", "pyodbc"):
        return "mssql"
    return name


def enable_sqlite_foreign_keys(engine: Engine | AsyncEngine) -> None:
    """Turn on ``PRAGMA foreign_keys`` for every new SQLite connection.

    SQLite ignores ``ON DELETE CASCADE`` unless this is set per connection.
    No-op for other dialects.
    """
    if get_dialect(engine) != "sqlite":
        return
    sync_engine = getattr(engine, "sync_engine", engine)

    @event.listens_for(sync_engine, "connect")
    def _set_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def upsert_grant(
    session: AsyncSession,
    dialect: str,
    model: type,
    file_id: int,
    user_id: int,
    capabilities: Capabilities,
    schema: str | None = None,
) -> int:
    """Create or replace the grant row for ``(file_id, user_id)`` in one statement.

    - SQLite/PostgreSQL: INSERT ... ON CONFLICT (file_id, user_id) DO UPDATE
    - MSSQL: MERGE INTO ... WITH (HOLDLOCK)

    ``created_at`` is only written on insert.  Returns rowcount.
    """
    now = datetime.now(UTC)
    values: dict[str, Any] = {
        "file_id": file_id,
        "user_id": user_id,
        **capabilities.as_dict(),
        "created_at": now,
        "updated_at": now,
    }
    if dialect == "mssql":
        return await _merge_mssql(session, model, values, schema)
    return await _on_conflict(session, dialect, model, values, schema)


async def _on_conflict(
    session: AsyncSession,
    dialect: str,
    model: type,
    values: dict[str, Any],
    schema: str | None,
) -> int:
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(_CONFLICT_KEYS),
        set_={k: stmt.excluded[k] for k in _UPDATE_KEYS},
    )
    if schema:
        stmt = stmt.execution_options(schema_translate_map={None: schema})

    result = await session.execute(stmt)
    return result.rowcount  # type: ignore[return-value]


async def _merge_mssql(
    session: AsyncSession,
    model: type,
    values: dict[str, Any],
    schema: str | None,
) -> int:
    table_name: str = getattr(model, "__tablename__", "sharegate_grants")
    if schema:
        table_name = f"[{schema}].{table_name}"
    source_cols = ", ".join(f":{k} AS {k}" for k in _CONFLICT_KEYS)
    on_clause = " AND ".join(f"target.{k} = source.{k}" for k in _CONFLICT_KEYS)
    update_set = ", ".join(f"target.{k} = :{k}" for k in _UPDATE_KEYS)
    insert_cols = ", ".join(values)
    insert_vals = ", ".join(f":{k}" for k in values)

    merge_sql = f"""
        MERGE INTO {table_name} WITH (HOLDLOCK) AS target
        USING (SELECT {source_cols}) AS source
        ON {on_clause}
        WHEN MATCHED THEN
            UPDATE SET {update_set}
        WHEN NOT MATCHED THEN
            INSERT ({insert_cols})
            VALUES ({insert_vals});
    """
    result = await session.execute(text(merge_sql), values)
    return result.rowcount  # type: ignore[return-value]
