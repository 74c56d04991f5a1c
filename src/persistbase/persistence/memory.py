"""
persistbase Persistence Layer - Memory Backend

In-memory parameter storage used when the database is switched off or
unusable. Data is lost when the object goes away.
"""

from typing import Any, Dict, List, Optional

from .base import ParamStore


class MemoryParams(ParamStore):
    """Plain dictionary-backed parameter bag."""

    persistent = False

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        existed = key in self._data
        self._data.pop(key, None)
        return existed

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data)

    def items(self) -> Dict[str, Any]:
        return dict(self._data)
