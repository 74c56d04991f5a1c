"""
Class Namespace

Maps entity classes to the EAV table pair holding their records.
"""

from typing import Callable, Dict, NamedTuple, Sequence, Tuple

from ..persistence.schema import table_name
from ..persistence.table_hash import PROPERTIES, RECORDS

NAMESPACE_TAG = "persistbase"

TableBase = Tuple[str, str]


class TableNamespace(NamedTuple):
    records: str
    properties: str


def class_identity(proto) -> str:
    """Fully qualified name of a class, or of an instance's class."""
    cls = proto if isinstance(proto, type) else type(proto)
    return f"{cls.__module__}.{cls.__qualname__}"


class ClassNamespace:
    """
    Derives table bases and names for entity classes.

    A class's base is computed once and reused for the life of the class.
    """

    def __init__(self, naming: Callable[[Sequence[str], str], str] = table_name,
                 tag: str = NAMESPACE_TAG):
        self._naming = naming
        self._tag = tag
        self._bases: Dict[type, TableBase] = {}

    def table_base(self, proto) -> TableBase:
        """Get the base for tables of this class."""
        cls = proto if isinstance(proto, type) else type(proto)
        base = self._bases.get(cls)
        if base is None:
            base = (self._tag, class_identity(cls))
            self._bases[cls] = base
        return base

    def table_name(self, base: Sequence[str], type_tag: str) -> str:
        """Get the name of a table from a base and a type tag."""
        return self._naming(base, type_tag)

    def tables_for(self, proto) -> TableNamespace:
        """Records and properties table names for a class."""
        base = self.table_base(proto)
        return TableNamespace(
            records=self.table_name(base, RECORDS),
            properties=self.table_name(base, PROPERTIES),
        )
