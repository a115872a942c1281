"""
Core MDB Wrapper components: the MongoDb facade, the key/value overlay
and connection setup.
"""

from .connection import create_database
from .key_values import KeyValueStore, default_value, is_default_value
from .mongo_db import MongoDb

__all__ = [
    "MongoDb",
    "KeyValueStore",
    "create_database",
    "default_value",
    "is_default_value",
]
