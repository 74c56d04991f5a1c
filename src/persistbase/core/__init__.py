"""
persistbase Core Module

Decides between database and in-memory storage for entities, maps entity
classes to their tables and runs parameter lookups.
"""

from .entity import Entity
from .gate import PersistenceGate
from .version import SchemaVersionGuard
from .namespace import ClassNamespace, TableNamespace, class_identity, NAMESPACE_TAG
from .query import Predicate, QueryBuilder, RecordSelector, normalize_predicates
from .factory import EntityFactory
from .context import PersistenceContext, get_context, init_context, reset_context

__all__ = [
    "Entity",
    "PersistenceGate",
    "SchemaVersionGuard",
    "ClassNamespace",
    "TableNamespace",
    "class_identity",
    "NAMESPACE_TAG",
    "Predicate",
    "QueryBuilder",
    "RecordSelector",
    "normalize_predicates",
    "EntityFactory",
    "PersistenceContext",
    "get_context",
    "init_context",
    "reset_context",
]
