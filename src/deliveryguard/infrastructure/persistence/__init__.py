"""
Specification store adapters.
"""

from deliveryguard.infrastructure.persistence.filesystem import (
    FilesystemSpecificationStore,
)
from deliveryguard.infrastructure.persistence.memory import InMemorySpecificationStore

__all__ = [
    "InMemorySpecificationStore",
    "FilesystemSpecificationStore",
]
