"""
Schema Version Guard

Soft compatibility check run before any persistent operation.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..persistence.schema import check_version

logger = logging.getLogger(__name__)


class SchemaVersionGuard:
    """Answers whether a store can be used by this version of persistbase."""

    def __init__(self, check: Callable[[Engine], bool] = check_version):
        self._check = check

    def is_compatible(self, handle: Optional[Engine]) -> bool:
        """
        Check the store's schema version marker.

        Mismatch, missing marker and read failure all answer False.
        """
        if not handle:
            return False

        try:
            compatible = bool(self._check(handle))
        except SQLAlchemyError as e:
            logger.warning(f"Could not read schema version from {handle.url}: {e}")
            return False

        if not compatible:
            logger.warning(f"Store {handle.url} has an incompatible schema version, "
                           f"using in-memory objects")
        return compatible
