"""Domain-scoped key-value facade over a single database table.

Every id passed to a store is qualified with the store's domain
(`domain::id`) before it reaches the table, and every payload is stored as
JSON text. A store holds only its domain, table name and database handle;
sub-domain stores share the handle of their parent.

    store = init('orders', database='sqlite://data/keyobject.db')
    await store.set('42', {'status': 'new'})      # stored as 'orders::42'
    await store.get('42')                         # {'status': 'new'}
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence

from keyobject_lib.config import DEFAULT_TABLE_NAME, resolve_options
from keyobject_lib.database import DatabaseProtocol, create_database
from keyobject_lib.keys import prefix_scope, qualify_id, sub_domain_name

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Marks an omitted payload argument; those default to an empty object
_UNSET: Any = object()


def _decode(rows: Sequence[Mapping[str, Any]]) -> List[Record]:
    return [{"id": r["id"], "data": json.loads(r["data"])} for r in rows]


class KeyObjectStore:
    def __init__(self, domain: str, database: DatabaseProtocol, table_name: str) -> None:
        self.domain = domain
        self.database = database
        self.table_name = table_name

    def __repr__(self) -> str:
        return f"KeyObjectStore(domain={self.domain!r}, table_name={self.table_name!r})"

    def define_id(self, id: str = "") -> str:
        return qualify_id(self.domain, id)

    @property
    def _dialect(self):
        return self.database.dialect

    async def get(self, id: str = "", default: Any = None) -> Any:
        """Return the value stored under `id`, or `default` when there is none."""
        key = self.define_id(id)
        query, params = self._dialect.point_select(self.table_name, key)
        logger.debug("get %s", key)
        rows = await self.database.execute(query, params)
        if not rows:
            return default
        return json.loads(rows[0]["data"])

    async def get_list(self, ids: Sequence[str]) -> List[Record]:
        """Batch lookup by stored ids.

        Ids are passed through unqualified; callers supply them in the form
        they have in the table (e.g. as returned by the other getters).
        """
        if not ids:
            return []
        logger.debug("get_list %d ids", len(ids))
        rows = await self.database.get_by_id_list(self.table_name, list(ids), "id")
        return _decode(rows)

    async def get_where_id_starts_with(self, prefix: Optional[str] = "") -> List[Record]:
        scope = prefix_scope(self.domain, prefix)
        query, params = self._dialect.prefix_select(self.table_name, scope)
        logger.debug("get_where_id_starts_with %s", scope)
        return _decode(await self.database.execute(query, params))

    async def get_where_id_ends_with(self, suffix: str = "") -> List[Record]:
        """Return records of this domain whose id ends with `suffix` (used verbatim)."""
        query, params = self._dialect.scoped_suffix_select(self.table_name, self.domain, suffix)
        logger.debug("get_where_id_ends_with %s in %s", suffix, self.domain)
        return _decode(await self.database.execute(query, params))

    async def get_all(self) -> List[Record]:
        return await self.get_where_id_starts_with("")

    async def set(self, id: str = "", data: Any = _UNSET) -> Any:
        """Store `data` as JSON under `id` (insert or replace) and return it.

        An omitted `data` stores an empty object. `None` is stored as JSON null.
        """
        if data is _UNSET:
            data = {}
        key = self.define_id(id)
        query, params = self._dialect.upsert(self.table_name, key, json.dumps(data))
        logger.debug("set %s", key)
        await self.database.apply(query, params)
        return data

    async def set_bulk(self, records: Sequence[MutableMapping[str, Any]]) -> None:
        """Upsert many records in one batch.

        The `id` of each record is qualified in place. `data` is handed to the
        backend as-is; its batch upsert does the JSON encoding.
        """
        for rec in records:
            rec["id"] = self.define_id(rec["id"])
        logger.debug("set_bulk %d records in %s", len(records), self.domain)
        await self.database.upsert_struct(self.table_name, records)

    def sub_domain(self, name: str) -> "KeyObjectStore":
        return KeyObjectStore(sub_domain_name(self.domain, name), self.database, self.table_name)

    async def delete(self, id: str = "") -> None:
        key = self.define_id(id)
        query, params = self._dialect.delete(self.table_name, key)
        logger.debug("delete %s", key)
        await self.database.apply(query, params)

    async def copy(self, from_id: str = "", to_id: str = "", value_if_null: Any = _UNSET) -> None:
        """Copy the value at `from_id` to `to_id` in one statement.

        When `from_id` has no row, `value_if_null` is written instead (an empty
        object when omitted; `None` writes JSON null), so `to_id` always exists
        afterwards.
        """
        source = self.define_id(from_id)
        target = self.define_id(to_id)
        fallback = {} if value_if_null is _UNSET else value_if_null
        query, params = self._dialect.copy(self.table_name, source, target, json.dumps(fallback))
        logger.debug("copy %s -> %s", source, target)
        await self.database.apply(query, params)


def init(
    domain: str = "",
    table_name: Optional[str] = None,
    database: "str | DatabaseProtocol | None" = None,
) -> KeyObjectStore:
    """Create a store for `domain`.

    `database` is either a backend instance or an address for
    `create_database`; when omitted the `YDB_ADDRESS` environment variable is
    read once, here.
    """
    if database is None or isinstance(database, str):
        options = resolve_options(table_name=table_name, database=database)
        return KeyObjectStore(domain, create_database(options.database), options.table_name)
    return KeyObjectStore(domain, database, table_name or DEFAULT_TABLE_NAME)
