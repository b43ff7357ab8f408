"""
Storage backends for saved architectures.
"""

from .backends import (
    ArchitectureStore,
    InMemoryArchitectureStore,
    JsonFileArchitectureStore,
    create_store,
)

__all__ = [
    "ArchitectureStore",
    "InMemoryArchitectureStore",
    "JsonFileArchitectureStore",
    "create_store",
]
