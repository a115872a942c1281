"""
Key/value overlay.

Stores arbitrary serializable values under string keys in the shared "Keys"
collection. Values are serialized to JSON with pydantic, using the value's
own type on write and the requested type on read.

A key holding its type's default value and a key that was never set are the
same state: setting a default value removes the record, and reading a
missing key returns the default of the requested type.
"""

from typing import Any, TypeVar

from ..constants import KEY_FIELD
from ..observability import get_logger, log_operation
from ..repositories.base import KeyValueEntity, type_adapter

V = TypeVar("V")


def default_value(value_type: Any) -> Any:
    """
    Return the default ("zero") value of a type.

    The default is whatever the type produces when called without arguments
    (0, "", False, [], a model whose fields all have defaults). Types that
    cannot be built that way (Optional[...], models with required fields)
    default to None.
    """
    try:
        return value_type()
    except (TypeError, ValueError):
        return None


def is_default_value(value: Any) -> bool:
    """Return True when ``value`` is None or equals its type's default."""
    if value is None:
        return True
    return value == default_value(type(value))


def serialize_value(value: Any) -> str:
    return type_adapter(type(value)).dump_json(value).decode("utf-8")


def deserialize_value(raw: str, value_type: Any) -> Any:
    return type_adapter(value_type).validate_json(raw)


class KeyValueStore:
    """
    Key/value records over a single collection.

    Records have the shape {"key": str, "value": str}. Writes are single
    upserts or deletes, so concurrent callers never leave two records for a
    key; a unique index on "key" is created before the first write.
    """

    def __init__(self, collection: Any):
        """
        Args:
            collection: Motor collection (or any object with the same API)
        """
        self._collection = collection
        self._index_created = False
        self._logger = get_logger(__name__, collection=getattr(collection, "name", None))

    async def ensure_index(self) -> None:
        """Create the unique index on "key" (idempotent)."""
        if self._index_created:
            return
        await self._collection.create_index(KEY_FIELD, unique=True)
        self._index_created = True

    async def set_key_value(self, key: str, value: Any) -> None:
        """
        Persist ``value`` under ``key``.

        Setting a default value deletes the record, or does nothing when no
        record exists.
        """
        key_filter = {KEY_FIELD: key}

        if is_default_value(value):
            result = await self._collection.delete_many(key_filter)
            if result.acknowledged and result.deleted_count:
                log_operation(self._logger, "delete_key", key=key)
            return

        await self.ensure_index()
        record = KeyValueEntity(key=key, value=serialize_value(value))
        await self._collection.update_one(key_filter, {"$set": record.to_dict()}, upsert=True)
        log_operation(self._logger, "set_key", key=key)

    async def get_key_value(self, key: str, value_type: type[V]) -> V:
        """
        Return the value stored under ``key`` as ``value_type``.

        Returns the default of ``value_type`` when the key is not set.
        """
        doc = await self._collection.find_one({KEY_FIELD: key})
        record = KeyValueEntity.from_dict(doc)
        if record is None:
            return default_value(value_type)
        return deserialize_value(record.value, value_type)
