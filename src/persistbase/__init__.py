"""
persistbase - Objects Optionally Backed by a Database

Property-bag objects that live in memory, or transparently in an SQLite
entity-attribute-value store when persistence is switched on.
"""

__version__ = "0.1.0"

from .config import PersistenceConfig, LoggingConfig, configure_logging
from .errors import PersistenceError, PersistenceUnavailableError, SerializationError
from .core import (
    Entity,
    EntityFactory,
    PersistenceContext, get_context, init_context, reset_context,
    PersistenceGate, SchemaVersionGuard, ClassNamespace, TableNamespace,
    Predicate, QueryBuilder, RecordSelector,
)
from .persistence import ParamStore, MemoryParams, TableHash, freeze, thaw

__all__ = [
    # Configuration
    'PersistenceConfig',
    'LoggingConfig',
    'configure_logging',

    # Errors
    'PersistenceError',
    'PersistenceUnavailableError',
    'SerializationError',

    # Core
    'Entity',
    'EntityFactory',
    'PersistenceContext',
    'get_context',
    'init_context',
    'reset_context',
    'PersistenceGate',
    'SchemaVersionGuard',
    'ClassNamespace',
    'TableNamespace',
    'Predicate',
    'QueryBuilder',
    'RecordSelector',

    # Storage
    'ParamStore',
    'MemoryParams',
    'TableHash',
    'freeze',
    'thaw',
]
