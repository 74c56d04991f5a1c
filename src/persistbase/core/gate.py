"""
Persistence Gate

Decides whether the database backend is switched on and hands out the
shared store handle when it is.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import PERSISTENCE_OPTION, SQLITE_MODE, PersistenceConfig
from ..persistence.database import getdbh

logger = logging.getLogger(__name__)


class PersistenceGate:
    """
    Entry point to the shared store.

    Args:
        config: Configuration supplying the persistence mode and base path
        connect: Connection factory taking the store path
    """

    def __init__(self, config: PersistenceConfig,
                 connect: Callable[[Path], Engine] = getdbh):
        self.config = config
        self._connect = connect

    def is_enabled(self) -> bool:
        """True iff the persistence option selects the SQLite backend."""
        return self.config.get_option(PERSISTENCE_OPTION) == SQLITE_MODE

    def database_path(self) -> Path:
        """Get the store file shared by every persistent class."""
        return self.config.database_path

    def database_handle(self) -> Optional[Engine]:
        """
        Get the store handle.

        Returns:
            The engine, or None if persistence is off or the store cannot be
            opened
        """
        if not self.is_enabled():
            return None

        path = self.database_path()
        try:
            return self._connect(path)
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Store {path} is unavailable, using in-memory objects: {e}")
            return None
