"""
Entity Factory

The one place where an entity's storage is chosen: a record in the shared
store when persistence is usable, a plain in-memory bag otherwise. The choice
is made at construction and never revisited.
"""

import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy.engine import Engine

from ..errors import PersistenceUnavailableError
from ..persistence.base import ParamStore
from ..persistence.database import exists_table
from ..persistence.memory import MemoryParams
from ..persistence.table_hash import TableHash
from .query import PredicateSet, normalize_predicates

if TYPE_CHECKING:
    from .context import PersistenceContext
    from .entity import Entity

logger = logging.getLogger(__name__)

E = TypeVar('E', bound='Entity')

StoreFactory = Callable[[Engine, Sequence[str], Optional[int]], ParamStore]


class EntityFactory:
    """
    Builds entities for a persistence context.

    Args:
        context: Context supplying the gate, version guard and namespace
        store_factory: Constructor for persistent stores
            (handle, table base, record id or None)
    """

    def __init__(self, context: 'PersistenceContext',
                 store_factory: StoreFactory = TableHash):
        self._context = context
        self._store_factory = store_factory

    def construct_uninitialized(self, cls: Type[E], require: bool = False) -> E:
        """
        Create a new, uninitialized entity of a class.

        Args:
            cls: Entity class to instantiate
            require: Raise instead of falling back to an in-memory entity

        Returns:
            Entity backed by a fresh record, or by memory if persistence is
            not usable
        """
        handle = self._context.active_handle()
        if handle is not None:
            base = self._context.namespace.table_base(cls)
            store = self._store_factory(handle, base, None)
        elif require:
            raise PersistenceUnavailableError(
                f"Cannot create persistent {cls.__name__}: persistence is not available")
        else:
            logger.debug("Creating in-memory %s", cls.__name__)
            store = MemoryParams()

        return cls._from_store(store)

    def select_by_params(self, cls: Type[E], predicates: PredicateSet = None, /, *,
                         require: bool = False, **params) -> Optional[List[E]]:
        """
        Get all stored entities of a class with the matching parameters.

        Returns:
            One entity per matching record, in query order, or None if the
            store is not being used
        """
        handle = self._context.active_handle()
        if handle is None:
            if require:
                raise PersistenceUnavailableError(
                    f"Cannot select {cls.__name__}: persistence is not available")
            return None

        ids = self._context.selector.fetch_ids(
            handle, cls, normalize_predicates(predicates, **params))
        base = self._context.namespace.table_base(cls)

        return [cls._from_store(self._store_factory(handle, base, record_id))
                for record_id in ids]

    def load(self, cls: Type[E], record_id: int) -> Optional[E]:
        """Get the stored entity with a record id, or None if there is none."""
        handle = self._context.active_handle()
        if handle is None:
            return None

        if not exists_table(handle, self._context.namespace.tables_for(cls).records):
            return None

        base = self._context.namespace.table_base(cls)
        store = self._store_factory(handle, base, record_id)
        if isinstance(store, TableHash) and not store.exists():
            return None
        return cls._from_store(store)
