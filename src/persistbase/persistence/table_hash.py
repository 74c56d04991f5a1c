"""
persistbase Persistence Layer - Table Hash

A parameter store backed by one record of an EAV table pair. Values are
frozen to canonical JSON text on the way in and thawed on the way out, so
equal values always compare equal in SQL.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, delete, insert, select
from sqlalchemy.engine import Engine

from ..errors import SerializationError
from .base import ParamStore
from .schema import create_tables, properties_table, records_table, table_name

logger = logging.getLogger(__name__)

RECORDS = "recs"
PROPERTIES = "props"


def freeze(value: Any) -> str:
    """
    Serialize a value for storage or for use as a query binding.

    Non-ASCII text is escaped, so lone surrogates never reach the driver.

    Raises:
        SerializationError: If the value has no JSON representation
    """
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot freeze {type(value).__name__} value: {e}") from e


def check_key(key: str) -> str:
    """
    Check that a parameter name can be bound as is.

    Raises:
        SerializationError: If the key is not a string encodable as UTF-8
    """
    if not isinstance(key, str):
        raise SerializationError(f"Parameter names must be strings, not {type(key).__name__}")
    try:
        key.encode("utf-8")
    except UnicodeEncodeError as e:
        raise SerializationError(f"Cannot bind parameter name {key!r}: {e}") from e
    return key


def thaw(text: Optional[str]) -> Any:
    """Deserialize a stored value."""
    if text is None:
        return None
    return json.loads(text)


class TableHash(ParamStore):
    """
    Record proxy in the EAV store.

    Without ``record_id`` a new record is allocated (creating the class's
    tables on first use). With one, the existing record is proxied as is.
    """

    persistent = True

    def __init__(self, handle: Engine, base: Sequence[str], record_id: Optional[int] = None):
        self._handle = handle
        self._base: Tuple[str, ...] = tuple(base)
        self._recs = records_table(table_name(self._base, RECORDS))
        self._props = properties_table(table_name(self._base, PROPERTIES))

        if record_id is None:
            self._id = self._allocate()
        else:
            self._id = int(record_id)

    def _allocate(self) -> int:
        with self._handle.begin() as conn:
            create_tables(conn, self._recs, self._props)
            result = conn.execute(insert(self._recs))
            record_id = result.inserted_primary_key[0]

        logger.debug("Allocated record %s in %s", record_id, self._recs.name)
        return record_id

    @property
    def record_id(self) -> int:
        return self._id

    @property
    def base(self) -> Tuple[str, ...]:
        return self._base

    @property
    def handle(self) -> Engine:
        return self._handle

    def _rows(self):
        return self._props.c.id == self._id

    def _key_rows(self, key: str):
        return and_(self._rows(), self._props.c["key"] == check_key(key))

    def get(self, key: str) -> Any:
        stmt = (
            select(self._props.c["value"])
            .where(self._key_rows(key))
            .limit(1)
        )
        with self._handle.connect() as conn:
            value = conn.execute(stmt).scalar()
        return thaw(value)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.delete(key)
            return

        frozen = freeze(value)
        match = self._key_rows(key)
        with self._handle.begin() as conn:
            conn.execute(delete(self._props).where(match))
            conn.execute(insert(self._props).values(id=self._id, key=key, value=frozen))

    def delete(self, key: str) -> bool:
        match = self._key_rows(key)
        with self._handle.begin() as conn:
            result = conn.execute(delete(self._props).where(match))
            deleted = result.rowcount > 0
        return deleted

    def has(self, key: str) -> bool:
        stmt = select(self._props.c.id).where(self._key_rows(key)).limit(1)
        with self._handle.connect() as conn:
            return conn.execute(stmt).first() is not None

    def keys(self) -> List[str]:
        stmt = (
            select(self._props.c["key"])
            .where(self._rows())
            .distinct()
            .order_by(self._props.c["key"])
        )
        with self._handle.connect() as conn:
            return list(conn.execute(stmt).scalars())

    def items(self) -> Dict[str, Any]:
        stmt = select(self._props.c["key"], self._props.c["value"]).where(self._rows())
        with self._handle.connect() as conn:
            return {key: thaw(value) for key, value in conn.execute(stmt)}

    def exists(self) -> bool:
        """Check if the backing record row is still present."""
        stmt = select(self._recs.c.id).where(self._recs.c.id == self._id)
        with self._handle.connect() as conn:
            return conn.execute(stmt).first() is not None

    def purge(self) -> None:
        """Delete the record and all of its properties."""
        with self._handle.begin() as conn:
            conn.execute(delete(self._props).where(self._rows()))
            conn.execute(delete(self._recs).where(self._recs.c.id == self._id))
        logger.debug("Purged record %s from %s", self._id, self._recs.name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TableHash):
            return NotImplemented
        return (self._handle.url == other._handle.url
                and self._base == other._base
                and self._id == other._id)

    def __hash__(self) -> int:
        return hash((str(self._handle.url), self._base, self._id))
