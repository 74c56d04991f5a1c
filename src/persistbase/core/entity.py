from typing import Optional

from ..persistence.base import ParamStore
from .mixins import EntityMixin, PersistenceMixin


class Entity(EntityMixin, PersistenceMixin):
    """
    Base class for objects optionally backed by the database.

    Subclasses behave the same whether their parameters live in memory or in
    a store record; the factory picks the storage when the object is built.
    Create instances with ``new_no_init`` or ``new_from_properties``.
    """

    def __init__(self, store: ParamStore):
        self._store = store

    @classmethod
    def _from_store(cls, store: ParamStore) -> 'Entity':
        return cls(store)

    @property
    def store(self) -> ParamStore:
        return self._store

    @property
    def is_persistent(self) -> bool:
        return self._store.persistent

    @property
    def record_id(self) -> Optional[int]:
        return self._store.record_id

    def __eq__(self, other) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return NotImplemented
        if self.is_persistent and other.is_persistent:
            return self._store == other._store
        return self is other

    def __hash__(self) -> int:
        if self.is_persistent:
            return hash((type(self), self._store))
        return id(self)

    def __repr__(self) -> str:
        kind = "persistent" if self.is_persistent else "memory"
        return f"<{self.__class__.__name__} {kind} record_id={self.record_id!r}>"
