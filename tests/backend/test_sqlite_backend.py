import asyncio
import json

from keyobject_lib.database.sqlite_backend import SqliteDatabase, quote_identifier
from tests.helpers import TABLE, run_with_sqlite


def test_quote_identifier_doubles_quotes():
    assert quote_identifier('key_object_db') == '"key_object_db"'
    assert quote_identifier('a"b') == '"a""b"'


def test_upsert_struct_encodes_and_replaces():
    async def scenario(db):
        await db.upsert_struct(TABLE, [{'id': 'a', 'data': {'x': 1}}, {'id': 'b', 'data': 'two'}])
        await db.upsert_struct(TABLE, [{'id': 'a', 'data': [3]}])
        await db.upsert_struct(TABLE, [])
        return await db.execute(f'SELECT id, data FROM {TABLE} ORDER BY id;')

    rows = run_with_sqlite(scenario)
    assert rows == [{'id': 'a', 'data': json.dumps([3])}, {'id': 'b', 'data': '"two"'}]


def test_get_by_id_list_returns_matching_rows_only():
    async def scenario(db):
        await db.upsert_struct(TABLE, [{'id': 'a', 'data': 1}, {'id': 'b', 'data': 2}])
        return await db.get_by_id_list(TABLE, ['b', 'zzz'], 'id'), await db.get_by_id_list(TABLE, [])

    found, empty = run_with_sqlite(scenario)
    assert found == [{'id': 'b', 'data': '2'}]
    assert empty == []


def test_file_database_persists_between_connections(tmp_path):
    path = tmp_path / 'nested' / 'kv.db'

    async def write():
        async with SqliteDatabase(path) as db:
            await db.create_table(TABLE)
            await db.upsert_struct(TABLE, [{'id': 'k', 'data': {'v': 1}}])

    async def read():
        async with SqliteDatabase(path) as db:
            return await db.get_by_id_list(TABLE, ['k'])

    asyncio.run(write())
    assert asyncio.run(read()) == [{'id': 'k', 'data': '{"v": 1}'}]


def test_close_is_repeatable():
    async def scenario():
        db = SqliteDatabase()
        await db.create_table(TABLE)
        await db.close()
        await db.close()
        return db._conn

    assert asyncio.run(scenario()) is None
