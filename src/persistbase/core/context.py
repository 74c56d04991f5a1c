"""
Persistence Context

Process-scoped service object bundling configuration, the store gate, the
version guard, class namespaces, queries and the entity factory.

Collaborators are passed in explicitly so tests can substitute any of them.
The process context is created lazily from the environment; applications
install their own with ``init_context`` and tests drop it with
``reset_context``.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from ..config import PersistenceConfig
from .factory import EntityFactory
from .gate import PersistenceGate
from .namespace import ClassNamespace
from .query import RecordSelector
from .version import SchemaVersionGuard

logger = logging.getLogger(__name__)


class PersistenceContext:
    """Everything an entity class needs to reach its storage."""

    def __init__(self,
                 config: Optional[PersistenceConfig] = None,
                 gate: Optional[PersistenceGate] = None,
                 guard: Optional[SchemaVersionGuard] = None,
                 namespace: Optional[ClassNamespace] = None):
        self.config = config if config is not None else PersistenceConfig.from_environment()
        self.gate = gate if gate is not None else PersistenceGate(self.config)
        self.guard = guard if guard is not None else SchemaVersionGuard()
        self.namespace = namespace if namespace is not None else ClassNamespace()
        self.selector = RecordSelector(self)
        self.factory = EntityFactory(self)

    def active_handle(self) -> Optional[Engine]:
        """
        Get the store handle if persistence is on, the store opens and its
        schema version is compatible; None otherwise.
        """
        if not self.gate.is_enabled():
            logger.debug("Persistence is disabled")
            return None

        handle = self.gate.database_handle()
        if handle is None or not self.guard.is_compatible(handle):
            return None

        return handle

    def is_active(self) -> bool:
        return self.active_handle() is not None


_context: Optional[PersistenceContext] = None


def get_context() -> PersistenceContext:
    """Get the process persistence context, creating it on first use."""
    global _context
    if _context is None:
        _context = PersistenceContext()
    return _context


def init_context(config: Optional[PersistenceConfig] = None, **collaborators) -> PersistenceContext:
    """Install a new process persistence context."""
    global _context
    _context = PersistenceContext(config, **collaborators)
    logger.debug("Initialized persistence context for %s", _context.gate.database_path())
    return _context


def reset_context() -> None:
    """Drop the process persistence context."""
    global _context
    _context = None
