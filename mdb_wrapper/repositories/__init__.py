"""
MDB Wrapper entity model and query building blocks.

Usage:
    from dataclasses import dataclass

    from mdb_wrapper.repositories import Entity

    @dataclass
    class User(Entity):
        email: str
        name: str = ""
"""

from .base import (
    NIL_ID,
    Entity,
    KeyValueEntity,
    is_default_id,
    is_null_or_deleted,
    not_deleted_filter,
)
from .memory import InMemoryCollection, InMemoryCursor, InMemoryDatabase, matches_filter
from .query import EntityQuery

__all__ = [
    "Entity",
    "KeyValueEntity",
    "NIL_ID",
    "is_default_id",
    "is_null_or_deleted",
    "not_deleted_filter",
    "EntityQuery",
    "InMemoryDatabase",
    "InMemoryCollection",
    "InMemoryCursor",
    "matches_filter",
]
