"""Database backends for KeyObject stores.

Concrete backends are imported lazily by `create_database` so the YDB SDK is
only loaded when a YDB address is used.
"""
from __future__ import annotations
import logging
from typing import Optional

from .base import DatabaseBackend, Row
from .interfaces import DatabaseProtocol, QueryDialect, Statement

logger = logging.getLogger(__name__)

YDB_SCHEMES = ("grpc://", "grpcs://")
SQLITE_SCHEME = "sqlite://"
SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


def create_database(address: Optional[str]) -> DatabaseBackend:
    """Return a backend for `address`.

    - `grpc://...` / `grpcs://...`: YDB connection string
    - `sqlite://<path>`, `:memory:` or a path ending in `.db`/`.sqlite`/`.sqlite3`: SQLite
    """
    if not address:
        raise RuntimeError("Database address not provided. Set YDB_ADDRESS or pass database.")

    if address.startswith(YDB_SCHEMES):
        from .ydb_backend import YdbDatabase
        logger.debug("Using YDB backend for %s", address)
        return YdbDatabase(address)

    if address.startswith(SQLITE_SCHEME) or address == ":memory:" or address.endswith(SQLITE_SUFFIXES):
        from .sqlite_backend import SqliteDatabase, MEMORY
        path = address[len(SQLITE_SCHEME):] if address.startswith(SQLITE_SCHEME) else address
        logger.debug("Using SQLite backend for %s", path or MEMORY)
        return SqliteDatabase(path or MEMORY)

    raise ValueError(f"Unsupported database address: {address!r}")


__all__ = [
    "DatabaseBackend",
    "DatabaseProtocol",
    "QueryDialect",
    "Row",
    "Statement",
    "create_database",
]
