"""
MongoDb repository facade.

Typed CRUD and query operations for any Entity subclass, with soft
deletion, plus the key/value overlay. Each entity type is stored in a
collection named after the type.

Usage:
    @dataclass
    class User(Entity):
        email: str

    db = MongoDb(MongoDbSettings("mongodb://localhost:27017", "app"))
    user_id = await db.add(User(email="john@example.com"))
    await db.delete(User, user_id)
    assert await db.get(User, user_id) is not None  # by-id lookups see deleted entities
    assert not await db.any(User, {"_id": user_id})
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, TypeVar

from ..config import MongoDbSettings
from ..constants import DELETE_BATCH_SIZE, ID_FIELD, KEYS_COLLECTION_NAME
from ..exceptions import ConfigurationError, EntityNotFoundError, StorageFailure
from ..observability import get_logger, log_operation
from ..repositories.base import T, is_default_id, not_deleted_filter
from ..repositories.query import EntityQuery
from .connection import create_database
from .key_values import KeyValueStore

V = TypeVar("V")


class MongoDb:
    """
    Repository facade over a MongoDB database.

    The facade holds no state besides the database handle and is safe to
    share between concurrent callers.
    """

    def __init__(
        self,
        settings: MongoDbSettings | None = None,
        *,
        database: Any = None,
        delete_batch_size: int = DELETE_BATCH_SIZE,
    ):
        """
        Initialize the facade.

        Args:
            settings: Connection settings, used when no database is given
            database: Motor database (or InMemoryDatabase) to use directly
            delete_batch_size: Number of soft deletes run concurrently per
                batch in delete_many

        Raises:
            ConfigurationError: If neither a database nor valid settings are
                provided, or delete_batch_size is below 1
        """
        if delete_batch_size < 1:
            raise ConfigurationError(
                f"delete_batch_size must be >= 1, got {delete_batch_size}",
                config_key="delete_batch_size",
                config_value=delete_batch_size,
            )

        self._client = None
        if database is None:
            if settings is None:
                raise ConfigurationError(
                    "MongoDb requires settings or a database", config_key="settings"
                )
            self._client, database = create_database(settings)

        self._database = database
        self._delete_batch_size = delete_batch_size
        self._logger = get_logger(__name__, database=getattr(database, "name", None))
        self.keys = KeyValueStore(database.get_collection(KEYS_COLLECTION_NAME))

    @property
    def database(self) -> Any:
        return self._database

    @property
    def delete_batch_size(self) -> int:
        return self._delete_batch_size

    def close(self) -> None:
        """Close the client if this facade created it."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _collection(self, entity_type: type[T]) -> Any:
        return self._database.get_collection(entity_type.collection_name())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query(self, entity_type: type[T], include_deleted: bool = False) -> EntityQuery[T]:
        """
        Return a composable query over the collection of ``entity_type``.

        Args:
            entity_type: Entity subclass
            include_deleted: When False, soft-deleted entities are filtered out
        """
        base_filter = None if include_deleted else not_deleted_filter()
        return EntityQuery(self._collection(entity_type), entity_type, base_filter)

    async def any(
        self,
        entity_type: type[T],
        filter: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> bool:
        """Return whether any entity matches ``filter`` (all entities if None)."""
        return await self.query(entity_type, include_deleted).where(filter).any()

    async def count(
        self,
        entity_type: type[T],
        filter: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> int:
        """Count entities matching ``filter`` (all entities if None)."""
        return await self.query(entity_type, include_deleted).where(filter).count()

    async def get(self, entity_type: type[T], id: uuid.UUID) -> T | None:
        """
        Get an entity by id.

        Soft-deleted entities are returned too; by-id lookups always search
        the full collection.
        """
        doc = await self._collection(entity_type).find_one({ID_FIELD: id})
        return entity_type.from_dict(doc)

    async def first_or_default(
        self,
        entity_type: type[T],
        filter: dict[str, Any],
        include_deleted: bool = False,
    ) -> T | None:
        """Return the first entity matching ``filter``, or None. Order is unspecified."""
        return await self.query(entity_type, include_deleted).where(filter).first_or_default()

    async def single_or_default(
        self,
        entity_type: type[T],
        filter: dict[str, Any],
        include_deleted: bool = False,
    ) -> T | None:
        """
        Return the entity matching ``filter``, or None.

        Raises:
            MultipleMatchesError: If more than one entity matches
        """
        return await self.query(entity_type, include_deleted).where(filter).single_or_default()

    async def find(
        self,
        entity_type: type[T],
        filter: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> list[T]:
        """Return all entities matching ``filter`` (all entities if None)."""
        return await self.query(entity_type, include_deleted).where(filter).to_list()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, entity: T) -> uuid.UUID:
        """
        Assign a new id and creation time to ``entity`` and insert it.

        Returns:
            The assigned id

        Raises:
            StorageFailure: If the insert is not acknowledged
        """
        entity.id = uuid.uuid4()
        entity.added = datetime.now(timezone.utc)

        collection = self._collection(type(entity))
        result = await collection.insert_one(entity.to_dict())
        if not result.acknowledged:
            raise StorageFailure(
                f"Insert of {type(entity).__name__} {entity.id} was not acknowledged",
                operation="insert_one",
                collection_name=type(entity).collection_name(),
            )

        log_operation(
            self._logger, "add", entity_type=type(entity).__name__, entity_id=entity.id
        )
        return entity.id

    async def replace(self, entity: T) -> bool:
        """
        Replace the stored entity with ``entity``, matched by id.

        An entity without an id is added instead. The stored ``added`` and
        ``deleted`` values are copied onto ``entity`` before the replacement,
        so a replace never resurrects or re-dates an entity.

        Returns:
            Whether the write was acknowledged

        Raises:
            EntityNotFoundError: If no entity with the id exists
        """
        if is_default_id(entity.id):
            await self.add(entity)
            return True

        entity_type = type(entity)
        stored = await self.get(entity_type, entity.id)
        if stored is None:
            raise EntityNotFoundError(
                f"Could not replace entity of type {entity_type.__name__}: "
                f"entity with id {entity.id} does not exist",
                entity_type=entity_type.__name__,
                entity_id=entity.id,
            )

        entity.deleted = stored.deleted
        entity.added = stored.added

        result = await self._collection(entity_type).replace_one(
            {ID_FIELD: entity.id}, entity.to_dict()
        )
        log_operation(
            self._logger, "replace", entity_type=entity_type.__name__, entity_id=entity.id
        )
        return result.acknowledged

    async def delete(self, entity_type: type[T], id: uuid.UUID) -> bool:
        """
        Soft delete the entity with ``id``.

        Raises:
            EntityNotFoundError: If the entity does not exist
        """
        return await self._set_deleted(entity_type, id, True)

    async def restore(self, entity_type: type[T], id: uuid.UUID) -> bool:
        """
        Revert a soft delete of the entity with ``id``.

        Raises:
            EntityNotFoundError: If the entity does not exist
        """
        return await self._set_deleted(entity_type, id, False)

    async def _set_deleted(self, entity_type: type[T], id: uuid.UUID, deleted: bool) -> bool:
        entity = await self.get(entity_type, id)
        if entity is None:
            raise EntityNotFoundError(
                f"Entity of type {entity_type.__name__} with id {id} was not found",
                entity_type=entity_type.__name__,
                entity_id=id,
            )

        entity.deleted = deleted
        result = await self._collection(entity_type).replace_one(
            {ID_FIELD: entity.id}, entity.to_dict()
        )
        log_operation(
            self._logger,
            "delete" if deleted else "restore",
            entity_type=entity_type.__name__,
            entity_id=id,
        )
        return result.acknowledged

    async def delete_many(self, entity_type: type[T], filter: dict[str, Any]) -> int:
        """
        Soft delete every entity matching ``filter``.

        Already deleted entities are matched too. Deletes run concurrently
        within batches of ``delete_batch_size``; batches run one after another.

        Returns:
            Number of acknowledged soft deletes
        """
        entities = await self.find(entity_type, filter, include_deleted=True)
        acknowledged = 0

        for start in range(0, len(entities), self._delete_batch_size):
            batch = entities[start : start + self._delete_batch_size]
            results = await asyncio.gather(
                *(self._set_deleted(entity_type, entity.id, True) for entity in batch)
            )
            acknowledged += sum(1 for result in results if result)

        log_operation(
            self._logger,
            "delete_many",
            entity_type=entity_type.__name__,
            matched=len(entities),
            count=acknowledged,
        )
        return acknowledged

    async def delete_hard(self, entity_type: type[T], id: uuid.UUID) -> bool:
        """
        Permanently remove the entity with ``id``. This is irreversible.

        Returns:
            Whether the delete was acknowledged; a missing entity is not an error
        """
        result = await self._collection(entity_type).delete_one({ID_FIELD: id})
        log_operation(
            self._logger, "delete_hard", entity_type=entity_type.__name__, entity_id=id
        )
        return result.acknowledged

    async def delete_hard_many(self, entity_type: type[T], filter: dict[str, Any]) -> int:
        """
        Permanently remove every entity matching ``filter``. This is irreversible.

        Returns:
            Number of removed entities
        """
        result = await self._collection(entity_type).delete_many(filter)
        log_operation(
            self._logger,
            "delete_hard_many",
            entity_type=entity_type.__name__,
            count=result.deleted_count,
        )
        return result.deleted_count

    # ------------------------------------------------------------------
    # Key/value overlay
    # ------------------------------------------------------------------

    async def set_key_value(self, key: str, value: Any) -> None:
        """Persist ``value`` under ``key``; a default value removes the key."""
        await self.keys.set_key_value(key, value)

    async def get_key_value(self, key: str, value_type: type[V]) -> V:
        """Return the value under ``key``, or the default of ``value_type``."""
        return await self.keys.get_key_value(key, value_type)
