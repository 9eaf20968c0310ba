from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

Statement = Tuple[str, Dict[str, Any]]


@runtime_checkable
class QueryDialect(Protocol):
    """Renders the facade's statement shapes as `(query, params)` pairs.

    Table names are quoted identifiers. Ids, prefixes, suffixes and JSON
    payloads are always bound parameters.
    """

    def point_select(self, table: str, id: str) -> Statement: ...

    def prefix_select(self, table: str, prefix: str) -> Statement: ...

    def scoped_suffix_select(self, table: str, domain: str, suffix: str) -> Statement: ...

    def upsert(self, table: str, id: str, data: str) -> Statement: ...

    def delete(self, table: str, id: str) -> Statement: ...

    def copy(self, table: str, from_id: str, to_id: str, value_if_null: str) -> Statement: ...


@runtime_checkable
class DatabaseProtocol(Protocol):
    """Database client protocol mirroring `keyobject_lib.database.DatabaseBackend`."""

    dialect: QueryDialect

    async def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]: ...

    async def apply(self, query: str, params: Optional[Mapping[str, Any]] = None) -> None: ...

    async def get_by_id_list(self, table: str, ids: Sequence[str], key_field: str = "id") -> List[Dict[str, Any]]: ...

    async def upsert_struct(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None: ...

    async def close(self) -> None: ...
