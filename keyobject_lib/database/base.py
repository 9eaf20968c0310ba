"""Database backend interface definitions.

Defines the DatabaseBackend abstract class wrapped by the KeyObject facade.
A backend owns a connection handle to one database and a query dialect that
renders the facade's statement shapes for that database.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

Row = Dict[str, Any]


class DatabaseBackend(ABC):
    """Abstract asynchronous database client.

    The connection handle is created once and reused by every call; it is
    released by `close`.
    """

    dialect: Any

    @abstractmethod
    async def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        """Run a reading query and return its rows as dicts."""

    @abstractmethod
    async def apply(self, query: str, params: Optional[Mapping[str, Any]] = None) -> None:
        """Run a writing query and commit it."""

    @abstractmethod
    async def get_by_id_list(self, table: str, ids: Sequence[str], key_field: str = "id") -> List[Row]:
        """Return the rows of `table` whose `key_field` is one of `ids`."""

    @abstractmethod
    async def upsert_struct(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        """Insert or replace all `rows` in one batch.

        Each row carries `id` and `data`; `data` is JSON-encoded here.
        """

    async def close(self) -> None:
        """Release the connection handle. Safe to call more than once."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
