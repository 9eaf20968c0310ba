"""YDB database client using the `ydb` SDK query service.

The driver and session pool are created on first use and shared by every
facade built on this backend. Queries are YQL with DECLAREd, typed
parameters; retries are left to `QuerySessionPool.execute_with_retries`.
"""
from __future__ import annotations
import asyncio
import json
import logging
from typing import Any, List, Mapping, Optional, Sequence

import ydb
import ydb.aio

from .base import DatabaseBackend, Row
from .interfaces import Statement

logger = logging.getLogger(__name__)

DRIVER_TIMEOUT = 10


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "\\`") + "`"


def _utf8(value: str):
    return (value, ydb.PrimitiveType.Utf8)


def _json(value: str):
    return (value, ydb.PrimitiveType.Json)


class YqlDialect:
    def point_select(self, table: str, id: str) -> Statement:
        query = (
            "DECLARE $id AS Utf8;\n"
            f"SELECT data FROM {quote_identifier(table)} WHERE id = $id;"
        )
        return query, {"$id": _utf8(id)}

    def prefix_select(self, table: str, prefix: str) -> Statement:
        query = (
            "DECLARE $prefix AS Utf8;\n"
            f"SELECT id, data FROM {quote_identifier(table)}\n"
            "WHERE StartsWith(id, $prefix);"
        )
        return query, {"$prefix": _utf8(prefix)}

    def scoped_suffix_select(self, table: str, domain: str, suffix: str) -> Statement:
        query = (
            "DECLARE $domain AS Utf8;\n"
            "DECLARE $suffix AS Utf8;\n"
            f"SELECT id, data FROM {quote_identifier(table)}\n"
            "WHERE StartsWith(id, $domain) AND EndsWith(id, $suffix);"
        )
        return query, {"$domain": _utf8(domain), "$suffix": _utf8(suffix)}

    def upsert(self, table: str, id: str, data: str) -> Statement:
        query = (
            "DECLARE $id AS Utf8;\n"
            "DECLARE $data AS Json;\n"
            f"UPSERT INTO {quote_identifier(table)} (id, data) VALUES ($id, $data);"
        )
        return query, {"$id": _utf8(id), "$data": _json(data)}

    def delete(self, table: str, id: str) -> Statement:
        query = (
            "DECLARE $id AS Utf8;\n"
            f"DELETE FROM {quote_identifier(table)} WHERE id = $id;"
        )
        return query, {"$id": _utf8(id)}

    def copy(self, table: str, from_id: str, to_id: str, value_if_null: str) -> Statement:
        t = quote_identifier(table)
        query = (
            "DECLARE $from_id AS Utf8;\n"
            "DECLARE $to_id AS Utf8;\n"
            "DECLARE $value_if_null AS Json;\n"
            f"$data = (SELECT data FROM {t} WHERE id = $from_id);\n"
            f"UPSERT INTO {t} (id, data) VALUES ($to_id, COALESCE($data, $value_if_null));"
        )
        return query, {
            "$from_id": _utf8(from_id),
            "$to_id": _utf8(to_id),
            "$value_if_null": _json(value_if_null),
        }


def _rows(result_sets) -> List[Row]:
    out: List[Row] = []
    for rs in result_sets:
        names = [c.name for c in rs.columns]
        for row in rs.rows:
            rec = {name: row[name] for name in names}
            # Json columns come back as text; keep bytes/str symmetric
            if isinstance(rec.get("data"), bytes):
                rec["data"] = rec["data"].decode("utf-8")
            out.append(rec)
    return out


class YdbDatabase(DatabaseBackend):
    """Client for a YDB database addressed by a connection string.

    Parameters
    - address: connection string such as
      `grpcs://ydb.serverless.yandexcloud.net:2135/?database=/ru-central1/...`
    - credentials: optional `ydb` credentials; defaults to
      `ydb.credentials_from_env_variables()` at connect time.
    """

    def __init__(self, address: str, credentials: Any = None) -> None:
        self.address = address
        self.dialect = YqlDialect()
        self._credentials = credentials
        self._driver: Optional[ydb.aio.Driver] = None
        self._pool: Optional[ydb.aio.QuerySessionPool] = None
        self._lock = asyncio.Lock()

    async def _session_pool(self) -> ydb.aio.QuerySessionPool:
        async with self._lock:
            if self._pool is None:
                credentials = self._credentials or ydb.credentials_from_env_variables()
                driver = ydb.aio.Driver(connection_string=self.address, credentials=credentials)
                try:
                    await driver.wait(timeout=DRIVER_TIMEOUT, fail_fast=True)
                except BaseException:
                    await driver.stop()
                    raise
                self._driver = driver
                self._pool = ydb.aio.QuerySessionPool(driver)
                logger.info("Connected to YDB at %s", self.address)
            return self._pool

    async def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        pool = await self._session_pool()
        result_sets = await pool.execute_with_retries(query, dict(params or {}))
        return _rows(result_sets)

    async def apply(self, query: str, params: Optional[Mapping[str, Any]] = None) -> None:
        pool = await self._session_pool()
        await pool.execute_with_retries(query, dict(params or {}))

    async def get_by_id_list(self, table: str, ids: Sequence[str], key_field: str = "id") -> List[Row]:
        if not ids:
            return []
        query = (
            "DECLARE $ids AS List<Utf8>;\n"
            f"SELECT * FROM {quote_identifier(table)} WHERE {quote_identifier(key_field)} IN $ids;"
        )
        params = {"$ids": (list(ids), ydb.ListType(ydb.PrimitiveType.Utf8))}
        return await self.execute(query, params)

    async def upsert_struct(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        struct = (
            ydb.StructType()
            .add_member("id", ydb.PrimitiveType.Utf8)
            .add_member("data", ydb.PrimitiveType.Json)
        )
        query = (
            "DECLARE $rows AS List<Struct<id: Utf8, data: Json>>;\n"
            f"UPSERT INTO {quote_identifier(table)} SELECT id, data FROM AS_TABLE($rows);"
        )
        values = [{"id": r["id"], "data": json.dumps(r["data"])} for r in rows]
        await self.apply(query, {"$rows": (values, ydb.ListType(struct))})

    async def close(self) -> None:
        async with self._lock:
            if self._pool is not None:
                await self._pool.stop()
                self._pool = None
            if self._driver is not None:
                await self._driver.stop()
                self._driver = None
                logger.info("Closed YDB driver for %s", self.address)
