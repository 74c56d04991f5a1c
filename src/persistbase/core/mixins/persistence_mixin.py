"""
PersistenceMixin: Class-level persistence operations.

Routes constructors and lookups through the class's persistence context.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from ..context import PersistenceContext
    from ..query import PredicateSet


class PersistenceMixin:
    """
    Persistence operations mixin.

    Provides constructors, parameter lookups and table naming for entity
    classes. The context is looked up per call, so classes can pin their
    own with ``_persistence_context``.
    """

    # Class attribute (underscore keeps it out of the parameter namespace)
    _persistence_context: Optional['PersistenceContext'] = None

    @classmethod
    def persistence_context(cls) -> 'PersistenceContext':
        if cls._persistence_context is not None:
            return cls._persistence_context

        # Import here to avoid circular dependency
        from ..context import get_context
        return get_context()

    @classmethod
    def table_base(cls) -> Tuple[str, str]:
        """Get the basename for tables of this class."""
        return cls.persistence_context().namespace.table_base(cls)

    @classmethod
    def table_name(cls, type_tag: str) -> str:
        """Get the name of a table of this class from its type."""
        namespace = cls.persistence_context().namespace
        return namespace.table_name(namespace.table_base(cls), type_tag)

    @classmethod
    def new_no_init(cls, require: bool = False):
        """
        Create a new object but don't initialize it.

        All other constructors go through this method.
        """
        return cls.persistence_context().factory.construct_uninitialized(cls, require=require)

    @classmethod
    def new_from_properties(cls, properties: Dict[str, Any], require: bool = False):
        """
        Create a new object, set its properties, then initialize it.

        If a property cannot be stored or ``initialize`` fails, a freshly
        allocated record is purged before the error propagates.
        """
        obj = cls.new_no_init(require=require)
        try:
            for key, value in properties.items():
                obj.set_param(key, value)
            obj.initialize()
        except Exception:
            if obj.is_persistent:
                obj.store.purge()
            raise
        return obj

    @classmethod
    def select_by_params(cls, predicates: 'PredicateSet' = None, /, *,
                         require: bool = False, **params) -> Optional[List[Any]]:
        """
        Get all stored objects of this class with the matching parameters.

        Predicates come as a mapping (or pairs) and as keyword arguments.
        ``require`` is an option, so a parameter named "require" has to be
        passed in the mapping.

        Returns None if the database is not being used.
        """
        return cls.persistence_context().factory.select_by_params(
            cls, predicates, require=require, **params)

    @classmethod
    def load(cls, record_id: int):
        """Get the stored object with a record id, or None."""
        return cls.persistence_context().factory.load(cls, record_id)

    def initialize(self) -> None:
        """Hook run by new_from_properties once properties are set."""
        pass
