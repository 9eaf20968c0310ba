"""Configuration for KeyObject stores and the HTTP server.

Facade options are resolved once, when a store is constructed. The only
implicit input is the `YDB_ADDRESS` environment variable, which supplies the
database address when none is configured explicitly.
"""
from __future__ import annotations
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "key_object_db"
DATABASE_ENV = "YDB_ADDRESS"
DEFAULT_CONFIG_PATH = Path("config/keyobject.yml")

CONFIG_KEYS = ("table_name", "database", "domain", "log_level")


@dataclass(frozen=True)
class StoreOptions:
    table_name: str = DEFAULT_TABLE_NAME
    database: Optional[str] = None


def resolve_options(
    table_name: Optional[str] = None,
    database: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StoreOptions:
    """Build `StoreOptions` from explicit values with the environment fallback.

    Explicit arguments always win. `database` falls back to the
    `YDB_ADDRESS` variable of `environ` (default `os.environ`).
    """
    env = os.environ if environ is None else environ
    return StoreOptions(
        table_name=table_name or DEFAULT_TABLE_NAME,
        database=database or env.get(DATABASE_ENV) or None,
    )


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """Load the YAML config file. A missing file yields an empty config."""
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        logger.debug("No config file at %s; using defaults", cfg_path)
        return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping")
    unknown = sorted(set(raw) - set(CONFIG_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", cfg_path, ", ".join(unknown))
    return {k: raw[k] for k in CONFIG_KEYS if k in raw}
