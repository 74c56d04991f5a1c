"""
persistbase Persistence Layer - Base Classes

This module provides the abstract interface shared by every parameter store
an entity can be backed by.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class ParamStore(ABC):
    """
    Abstract base class for entity parameter storage.

    An entity holds exactly one store for its whole lifetime. The in-memory
    implementation and the database-backed one expose the same get/set
    contract so entity code does not need to know which one it got.
    """

    persistent: bool = False

    @property
    def record_id(self) -> Optional[int]:
        """Identifier of the backing record, or None for in-memory stores."""
        return None

    @abstractmethod
    def get(self, key: str) -> Any:
        """
        Get the value stored under a key.

        Args:
            key: Parameter name

        Returns:
            The stored value, or None if the key is not set
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store a value under a key, replacing any previous value.

        Setting None removes the key.

        Args:
            key: Parameter name
            value: Value to store
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: Parameter name

        Returns:
            True if the key existed, False otherwise
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List the parameter names currently set."""
        pass

    def has(self, key: str) -> bool:
        """Check if a key is set."""
        return key in self.keys()

    def items(self) -> Dict[str, Any]:
        """Get every parameter as a dictionary."""
        return {key: self.get(key) for key in self.keys()}

    def purge(self) -> None:
        """Remove every parameter. Persistent stores also drop their record."""
        for key in self.keys():
            self.delete(key)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} record_id={self.record_id!r}>"
