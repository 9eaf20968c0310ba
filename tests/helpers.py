import asyncio
from typing import Any, Awaitable, Callable

from keyobject_lib.database.sqlite_backend import SqliteDatabase, SqliteDialect

TABLE = "key_object_db"


def run_with_sqlite(scenario: Callable[[SqliteDatabase], Awaitable[Any]]) -> Any:
    """Run `scenario(db)` against a fresh in-memory SQLite table and close it afterwards."""
    async def main():
        db = SqliteDatabase()
        await db.create_table(TABLE)
        try:
            return await scenario(db)
        finally:
            await db.close()
    return asyncio.run(main())


class RecordingDatabase:
    """Database double that records every call and returns canned rows."""

    def __init__(self, rows=None, id_rows=None):
        self.dialect = SqliteDialect()
        self.rows = rows or []
        self.id_rows = id_rows or []
        self.calls = []

    async def execute(self, query, params=None):
        self.calls.append(('execute', query, params))
        return [dict(r) for r in self.rows]

    async def apply(self, query, params=None):
        self.calls.append(('apply', query, params))

    async def get_by_id_list(self, table, ids, key_field='id'):
        self.calls.append(('get_by_id_list', table, list(ids), key_field))
        return [dict(r) for r in self.id_rows]

    async def upsert_struct(self, table, rows):
        self.calls.append(('upsert_struct', table, [dict(r) for r in rows]))

    async def close(self):
        self.calls.append(('close',))
