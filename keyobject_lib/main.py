"""Application factory for the KeyObject FastAPI app.

`create_app(config)` performs all setup (logging, config loading, database
and store composition, router registration) so tests can construct isolated
apps:

    from keyobject_lib.main import create_app, Config
    app = create_app(Config(database=':memory:'))
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from keyobject_lib.bootstrap import bootstrap_database
from keyobject_lib.config import DEFAULT_CONFIG_PATH, load_config, resolve_options
from keyobject_lib.database import create_database
from keyobject_lib.logging_config import configure_logging
from keyobject_lib.services import ServiceContainer
from keyobject_lib.store import KeyObjectStore


@dataclass
class Config:
    config_path: Path = DEFAULT_CONFIG_PATH
    # Explicit values override the config file; database then falls back to YDB_ADDRESS
    database: Optional[str] = None
    table_name: Optional[str] = None
    domain: Optional[str] = None


def create_app(config: Config) -> FastAPI:
    logger = configure_logging(config.config_path)
    file_cfg = load_config(config.config_path)

    options = resolve_options(
        table_name=config.table_name or file_cfg.get('table_name'),
        database=config.database or file_cfg.get('database'),
    )
    domain = config.domain if config.domain is not None else (file_cfg.get('domain') or '')
    database = create_database(options.database)
    logger.info("Serving table %s (domain %r) from %s", options.table_name, domain, type(database).__name__)

    container = ServiceContainer()
    container.register_singleton("store_options", options)
    container.register_singleton("database", database)
    container.register_factory("store", lambda: KeyObjectStore(domain, database, options.table_name))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await bootstrap_database(database, options.table_name)
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title="KeyObject Server", lifespan=lifespan)
    app.state.container = container

    from keyobject_lib.api import router as records_router
    app.include_router(records_router, prefix='/api')

    return app
