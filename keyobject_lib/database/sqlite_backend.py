"""SQLite-backed database client using aiosqlite.

Used for local runs and tests. A single connection is opened on first use
and shared by every facade built on this backend. The table schema is
`id TEXT PRIMARY KEY, data TEXT`; `create_table` creates it on request.
"""
from __future__ import annotations
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import aiosqlite

from .base import DatabaseBackend, Row
from .interfaces import Statement

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SqliteDialect:
    """SQL for SQLite with named (`:name`) parameters.

    Prefix and suffix checks compare `substr` slices instead of using LIKE,
    so `%` and `_` in ids match literally.
    """

    def point_select(self, table: str, id: str) -> Statement:
        return f"SELECT data FROM {quote_identifier(table)} WHERE id = :id;", {"id": id}

    def prefix_select(self, table: str, prefix: str) -> Statement:
        query = (
            f"SELECT id, data FROM {quote_identifier(table)}\n"
            "WHERE substr(id, 1, length(:prefix)) = :prefix;"
        )
        return query, {"prefix": prefix}

    def scoped_suffix_select(self, table: str, domain: str, suffix: str) -> Statement:
        query = (
            f"SELECT id, data FROM {quote_identifier(table)}\n"
            "WHERE substr(id, 1, length(:domain)) = :domain\n"
            "AND (:suffix = '' OR substr(id, -length(:suffix)) = :suffix);"
        )
        return query, {"domain": domain, "suffix": suffix}

    def upsert(self, table: str, id: str, data: str) -> Statement:
        query = f"INSERT OR REPLACE INTO {quote_identifier(table)} (id, data) VALUES (:id, :data);"
        return query, {"id": id, "data": data}

    def delete(self, table: str, id: str) -> Statement:
        return f"DELETE FROM {quote_identifier(table)} WHERE id = :id;", {"id": id}

    def copy(self, table: str, from_id: str, to_id: str, value_if_null: str) -> Statement:
        t = quote_identifier(table)
        query = (
            f"INSERT OR REPLACE INTO {t} (id, data)\n"
            f"VALUES (:to_id, COALESCE((SELECT data FROM {t} WHERE id = :from_id), :value_if_null));"
        )
        return query, {"from_id": from_id, "to_id": to_id, "value_if_null": value_if_null}


class SqliteDatabase(DatabaseBackend):
    def __init__(self, path: str | Path = MEMORY) -> None:
        self.path = str(path)
        self.dialect = SqliteDialect()
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def _connection(self) -> aiosqlite.Connection:
        async with self._lock:
            if self._conn is None:
                if self.path != MEMORY:
                    Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                conn = await aiosqlite.connect(self.path)
                conn.row_factory = aiosqlite.Row
                self._conn = conn
                logger.debug("Opened SQLite database %s", self.path)
            return self._conn

    async def create_table(self, table: str) -> None:
        query = f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} (id TEXT PRIMARY KEY, data TEXT);"
        await self.apply(query)

    async def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        conn = await self._connection()
        async with conn.execute(query, dict(params or {})) as cursor:
            rows = await cursor.fetchall()
        return [dict(r) for r in rows]

    async def apply(self, query: str, params: Optional[Mapping[str, Any]] = None) -> None:
        conn = await self._connection()
        await conn.execute(query, dict(params or {}))
        await conn.commit()

    async def get_by_id_list(self, table: str, ids: Sequence[str], key_field: str = "id") -> List[Row]:
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        query = f"SELECT * FROM {quote_identifier(table)} WHERE {quote_identifier(key_field)} IN ({placeholders});"
        conn = await self._connection()
        async with conn.execute(query, list(ids)) as cursor:
            rows = await cursor.fetchall()
        return [dict(r) for r in rows]

    async def upsert_struct(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        query = f"INSERT OR REPLACE INTO {quote_identifier(table)} (id, data) VALUES (?, ?);"
        conn = await self._connection()
        await conn.executemany(query, [(r["id"], json.dumps(r["data"])) for r in rows])
        await conn.commit()

    async def close(self) -> None:
        async with self._lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
                logger.debug("Closed SQLite database %s", self.path)
