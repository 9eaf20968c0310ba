"""Bootstrap helpers for KeyObject server startup.

The facade never creates its table. For backends that can create the schema
themselves (SQLite), startup does it once so a fresh local database is usable.
"""
import logging

logger = logging.getLogger(__name__)


async def bootstrap_database(database, table_name: str) -> bool:
    """Ensure `table_name` exists when `database` supports `create_table`.

    Returns True when the table was ensured, False when the backend manages
    its schema externally (YDB).
    """
    create_table = getattr(database, 'create_table', None)
    if create_table is None:
        logger.info("Backend %s manages its own schema; expecting table %s", type(database).__name__, table_name)
        return False
    await create_table(table_name)
    logger.info("Ensured table %s", table_name)
    return True
