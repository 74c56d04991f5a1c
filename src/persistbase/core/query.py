"""
Record Queries

Finds the records of a class whose parameters match a conjunction of
key/value predicates.

The properties table is self-joined once per predicate::

    SELECT t1.id FROM props AS t1
        JOIN props AS t2 ON t1.id = t2.id
        ...
    WHERE t1.key = ? AND t1.value = ?
      AND t2.key = ? AND t2.value = ?
      ...

Each alias stands for a distinct property row, so a record matches when it
has a row for every predicate. Keys and frozen values only ever travel as
bound parameters.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Table, and_, bindparam, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Select

from ..errors import PersistenceUnavailableError
from ..persistence.database import exists_table
from ..persistence.schema import properties_table, records_table
from ..persistence.table_hash import check_key, freeze

if TYPE_CHECKING:
    from .context import PersistenceContext

logger = logging.getLogger(__name__)


class Predicate(BaseModel):
    """A single required key=value match."""
    model_config = ConfigDict(frozen=True)

    key: str
    value: Any


PredicateSet = Union[Mapping[str, Any], Iterable[Union[Predicate, Tuple[str, Any]]], None]


def normalize_predicates(predicates: PredicateSet = None, /, **params) -> List[Predicate]:
    """
    Turn the accepted predicate spellings into a list of Predicates.

    Accepts a mapping, an iterable of Predicates or (key, value) pairs, and
    keyword arguments, in that order.
    """
    result: List[Predicate] = []

    if isinstance(predicates, Mapping):
        items = predicates.items()
    else:
        items = predicates or ()

    for item in items:
        if isinstance(item, Predicate):
            result.append(item)
        else:
            key, value = item
            result.append(Predicate(key=check_key(key), value=value))

    result.extend(Predicate(key=check_key(key), value=value) for key, value in params.items())
    return result


class QueryBuilder:
    """
    Builds the id query for one class's table pair.

    Aliases, join clauses, filter conditions and bindings are accumulated
    side by side, so binding order always follows placeholder order: key
    then frozen value, predicate by predicate.
    """

    def __init__(self, records: Table, properties: Table,
                 serialize: Callable[[Any], str] = freeze):
        self._records = records
        self._properties = properties
        self._serialize = serialize
        self._aliases = []
        self._joins = []
        self._conditions = []
        self._binds: List[Tuple[str, Any]] = []

    def where(self, key: str, value: Any) -> 'QueryBuilder':
        """Add a predicate. The value is frozen immediately."""
        key = check_key(key)
        frozen = self._serialize(value)
        index = len(self._aliases) + 1
        alias = self._properties.alias(f"t{index}")

        if self._aliases:
            first = self._aliases[0]
            self._joins.append((alias, first.c.id == alias.c.id))

        key_param = bindparam(f"key_{index}", key)
        value_param = bindparam(f"value_{index}", frozen)

        self._aliases.append(alias)
        self._conditions.append(alias.c["key"] == key_param)
        self._conditions.append(alias.c["value"] == value_param)
        self._binds.append((key_param.key, key))
        self._binds.append((value_param.key, frozen))
        return self

    def where_all(self, predicates: Iterable[Predicate]) -> 'QueryBuilder':
        for predicate in predicates:
            self.where(predicate.key, predicate.value)
        return self

    @property
    def binds(self) -> List[Tuple[str, Any]]:
        """Bound parameters as (name, value) pairs in placeholder order."""
        return list(self._binds)

    def __len__(self) -> int:
        return len(self._aliases)

    def build(self) -> Select:
        """Build the SELECT statement for the accumulated predicates."""
        if not self._aliases:
            return select(self._records.c.id)

        first = self._aliases[0]
        source = first
        for alias, onclause in self._joins:
            source = source.join(alias, onclause)

        return select(first.c.id).select_from(source).where(and_(*self._conditions))


class RecordSelector:
    """Runs id queries against the shared store, gated by the context."""

    def __init__(self, context: 'PersistenceContext'):
        self._context = context

    def select_ids(self, proto, predicates: PredicateSet = None, /, *,
                   require: bool = False, **params) -> Optional[List[int]]:
        """
        Get the ids of all records of a class matching every predicate.

        Args:
            proto: Entity class (or instance)
            predicates: Predicates as a mapping or an iterable of pairs
            require: Raise instead of returning None when the store is unusable
            **params: More predicates as keyword arguments

        Keyword predicates may use any name except "require"; pass that one
        in the mapping.

        Returns:
            Matching ids in no particular order, or None if there is no
            usable store to query
        """
        handle = self._context.active_handle()
        if handle is None:
            if require:
                raise PersistenceUnavailableError(
                    f"Cannot query {proto!r}: persistence is not available")
            return None

        return self.fetch_ids(handle, proto, normalize_predicates(predicates, **params))

    def fetch_ids(self, handle: Engine, proto, predicates: List[Predicate]) -> List[int]:
        """Run the id query on an already vetted handle."""
        tables = self._context.namespace.tables_for(proto)
        builder = QueryBuilder(
            records_table(tables.records),
            properties_table(tables.properties),
        ).where_all(predicates)

        if not predicates:
            if not exists_table(handle, tables.records):
                return []
        elif not exists_table(handle, tables.properties):
            return []

        stmt = builder.build()

        try:
            with handle.connect() as conn:
                ids = list(conn.execute(stmt).scalars())
        except SQLAlchemyError as e:
            logger.error(f"Error selecting {tables.records} ids with {len(builder)} predicates: {e}")
            raise

        logger.debug("Selected %d ids from %s", len(ids), tables.records)
        return ids
