"""
persistbase Persistence Module

Storage backends an entity can sit on: a plain in-memory bag, or a record
in the shared EAV store.
"""

from .base import ParamStore
from .memory import MemoryParams
from .table_hash import TableHash, check_key, freeze, thaw, RECORDS, PROPERTIES
from .schema import (
    SCHEMA_VERSION, SchemaVersion, table_name, check_version, stamp_version, read_version
)
from .database import getdbh, exists_table, dispose_all

__all__ = [
    "ParamStore",
    "MemoryParams",
    "TableHash",
    "check_key",
    "freeze",
    "thaw",
    "RECORDS",
    "PROPERTIES",
    "SCHEMA_VERSION",
    "SchemaVersion",
    "table_name",
    "check_version",
    "stamp_version",
    "read_version",
    "getdbh",
    "exists_table",
    "dispose_all",
]
