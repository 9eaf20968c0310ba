"""Domain-scoped key-value facade over a managed database table."""
from .store import KeyObjectStore, init
from .database import DatabaseBackend, create_database

__all__ = ["KeyObjectStore", "init", "DatabaseBackend", "create_database"]
