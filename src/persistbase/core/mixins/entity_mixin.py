"""
EntityMixin: Parameter access without storage dependencies.

This mixin provides the parameter API every entity exposes. It only talks to
``self.store``, so it works the same over memory and database storage.
"""

import re
from typing import Any, Dict, List

_TRUE_VALUES = {"true", "yes", "on", "1"}


class EntityMixin:
    """
    Parameter access mixin.

    Provides get/set, defaults, boolean interpretation and pattern lookup on
    top of the entity's parameter store.
    """

    def param(self, key: str) -> Any:
        """Get a parameter value, or None if it is not set."""
        return self.store.get(key)

    def set_param(self, key: str, value: Any) -> None:
        """Set a parameter. Setting None removes it."""
        self.store.set(key, value)

    def has_param(self, key: str) -> bool:
        return self.store.has(key)

    def delete_param(self, key: str) -> bool:
        return self.store.delete(key)

    def param_default(self, key: str, default: Any) -> Any:
        """Get a parameter value, or ``default`` if it is not set."""
        value = self.store.get(key)
        return default if value is None else value

    def param_boolean(self, key: str) -> bool:
        """
        Interpret a parameter as a boolean.

        ``true``, ``yes``, ``on`` and ``1`` are true (case-insensitive);
        anything else, including a missing parameter, is false.
        """
        value = self.store.get(key)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def params_matching(self, pattern: str) -> List[str]:
        """Names of the parameters matching a regular expression."""
        regex = re.compile(pattern, re.IGNORECASE)
        return sorted(key for key in self.store.keys() if regex.search(key))

    def params(self) -> Dict[str, Any]:
        """All parameters as a dictionary."""
        return self.store.items()
