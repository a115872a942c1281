"""
Entity Base Types

Defines the entity base class the MongoDb facade works with, plus the
key/value record stored in the shared "Keys" collection.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter

from ..constants import DELETED_FIELD, ID_FIELD

NIL_ID = uuid.UUID(int=0)


@lru_cache(maxsize=256)
def type_adapter(value_type: Any) -> TypeAdapter:
    """Return a cached pydantic TypeAdapter for ``value_type``."""
    return TypeAdapter(value_type)


@dataclass(kw_only=True)
class Entity:
    """
    Base class for domain entities.

    All entities carry an id, a creation timestamp and a soft-delete flag.
    These three fields are owned by the MongoDb facade: it assigns ``id`` and
    ``added`` on insert and keeps the stored ``added``/``deleted`` values when
    an entity is replaced.

    Example:
        @dataclass
        class User(Entity):
            email: str
            name: str
            role: str = "user"
    """

    id: uuid.UUID | None = None
    added: datetime | None = None
    deleted: bool = False

    @classmethod
    def collection_name(cls) -> str:
        """Name of the collection entities of this type are stored in."""
        return cls.__name__

    def to_dict(self) -> dict[str, Any]:
        """
        Convert entity to dictionary for storage.

        Nested dataclasses and models become subdocuments; ids, datetimes
        and other BSON-native values are kept as Python objects.
        """
        data = type_adapter(type(self)).dump_python(self)
        data[ID_FIELD] = data.pop("id")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Entity | None":
        """
        Create entity from dictionary (e.g., from database).

        Subdocuments are rebuilt into the declared field types.
        """
        if data is None:
            return None

        data = dict(data)
        if ID_FIELD in data:
            data["id"] = data.pop(ID_FIELD)

        # Unknown document fields are ignored
        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        return type_adapter(cls).validate_python(filtered_data)


T = TypeVar("T", bound=Entity)


@dataclass
class KeyValueEntity:
    """A serialized value stored under a string key."""

    key: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "KeyValueEntity | None":
        if data is None:
            return None
        return cls(key=data["key"], value=data["value"])


def is_default_id(value: uuid.UUID | None) -> bool:
    """Return True when ``value`` is unset (None or the nil UUID)."""
    return value is None or value == NIL_ID


def is_null_or_deleted(entity: Entity | None) -> bool:
    """Return True when the entity is missing or soft-deleted."""
    if entity is None:
        return True
    return entity.deleted


def not_deleted_filter() -> dict[str, Any]:
    """Filter matching documents that are not soft-deleted."""
    return {DELETED_FIELD: {"$ne": True}}
