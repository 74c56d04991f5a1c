"""
Core mixins for entity functionality.

These mixins split the entity API into parameter access and class-level
persistence operations.
"""

from .entity_mixin import EntityMixin
from .persistence_mixin import PersistenceMixin

__all__ = ["EntityMixin", "PersistenceMixin"]
