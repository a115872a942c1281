"""
MDB_WRAPPER - MongoDB Wrapper

Typed repository facade over MongoDB with soft deletion, filter-based
querying and a key/value store kept in the same database.
"""

from .config import MongoDbSettings
from .core import KeyValueStore, MongoDb
from .exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MongoWrapperError,
    MultipleMatchesError,
    StorageFailure,
)
from .repositories import (
    Entity,
    EntityQuery,
    InMemoryDatabase,
    is_null_or_deleted,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "MongoDb",
    "MongoDbSettings",
    "KeyValueStore",
    # Entities
    "Entity",
    "EntityQuery",
    "InMemoryDatabase",
    "is_null_or_deleted",
    # Errors
    "MongoWrapperError",
    "ConfigurationError",
    "EntityNotFoundError",
    "MultipleMatchesError",
    "StorageFailure",
]
