"""
persistbase Persistence Layer - Connection Management

One SQLAlchemy engine per store file, created on first use and kept for the
life of the process.
"""

import atexit
import logging
from pathlib import Path
from typing import Dict, Union

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine

from .schema import stamp_version

logger = logging.getLogger(__name__)

# Process-wide engine cache, keyed by store path
_engines: Dict[str, Engine] = {}


def getdbh(path: Union[str, Path]) -> Engine:
    """
    Get the database handle for a store file.

    A store that has no tables at all is new and gets stamped with the
    current schema version. Connection failures propagate as
    ``SQLAlchemyError`` and nothing is cached for that path.

    Args:
        path: Location of the SQLite store file

    Returns:
        Engine bound to the store
    """
    key = str(Path(path))
    engine = _engines.get(key)
    if engine is not None:
        return engine

    engine = create_engine(f"sqlite:///{key}")
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")

        if not inspect(engine).get_table_names():
            stamp_version(engine)
    except Exception:
        engine.dispose()
        raise

    logger.debug("Opened store %s", key)
    _engines[key] = engine
    return engine


def exists_table(handle: Engine, name: str) -> bool:
    """Check if a table exists in the store."""
    return inspect(handle).has_table(name)


def dispose_all() -> None:
    """Dispose every cached engine."""
    for key, engine in list(_engines.items()):
        engine.dispose()
        logger.debug("Closed store %s", key)
    _engines.clear()


atexit.register(dispose_all)
