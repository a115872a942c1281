"""
Composable entity queries.

An EntityQuery is a lazily-evaluated handle over one entity collection.
Filters are MongoDB filter documents, so composing them is plain dict work
and the driver receives native queries. Nothing is sent to the backend until
one of the async terminal operations runs.

Usage:
    query = db.query(User).where({"role": "admin"}).sort("name")
    admins = await query.to_list()
    if await query.where({"active": True}).any():
        ...
"""

from collections.abc import AsyncIterator
from typing import Any, Generic

from pymongo import ASCENDING

from ..exceptions import MultipleMatchesError
from .base import T


class EntityQuery(Generic[T]):
    """Immutable, composable query over a collection of ``entity_class``."""

    def __init__(
        self,
        collection: Any,
        entity_class: type[T],
        filter: dict[str, Any] | None = None,
        *,
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int = 0,
    ):
        """
        Args:
            collection: Motor collection (or any object with the same API)
            entity_class: Entity subclass documents are converted to
            filter: Base filter document
            sort: List of (field, direction) tuples
            skip: Number of documents to skip
            limit: Maximum documents to return (0 means no limit)
        """
        self._collection = collection
        self._entity_class = entity_class
        self._filter = dict(filter or {})
        self._sort = list(sort or [])
        self._skip = skip
        self._limit = limit

    @property
    def filter(self) -> dict[str, Any]:
        """The composed filter document."""
        return dict(self._filter)

    @property
    def entity_class(self) -> type[T]:
        return self._entity_class

    def _copy(self, **changes: Any) -> "EntityQuery[T]":
        options = {
            "filter": self._filter,
            "sort": self._sort,
            "skip": self._skip,
            "limit": self._limit,
        }
        options.update(changes)
        return EntityQuery(self._collection, self._entity_class, **options)

    def where(self, filter: dict[str, Any] | None) -> "EntityQuery[T]":
        """Return a new query additionally restricted by ``filter``."""
        if not filter:
            return self
        if not self._filter:
            return self._copy(filter=filter)
        return self._copy(filter={"$and": [self._filter, filter]})

    def sort(
        self, key_or_list: str | list[tuple[str, int]], direction: int = ASCENDING
    ) -> "EntityQuery[T]":
        """Return a new query with additional sort keys."""
        if isinstance(key_or_list, str):
            keys = [(key_or_list, direction)]
        else:
            keys = list(key_or_list)
        return self._copy(sort=self._sort + keys)

    def skip(self, count: int) -> "EntityQuery[T]":
        if count < 0:
            raise ValueError(f"skip must be >= 0, got {count}")
        return self._copy(skip=count)

    def limit(self, count: int) -> "EntityQuery[T]":
        if count < 0:
            raise ValueError(f"limit must be >= 0, got {count}")
        return self._copy(limit=count)

    def _cursor(self, limit: int = 0):
        cursor = self._collection.find(self._filter)

        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip > 0:
            cursor = cursor.skip(self._skip)

        effective_limit = self._limit
        if limit and (not effective_limit or limit < effective_limit):
            effective_limit = limit
        if effective_limit > 0:
            cursor = cursor.limit(effective_limit)
        return cursor

    def _to_entity(self, doc: dict[str, Any]) -> T:
        return self._entity_class.from_dict(doc)

    async def to_list(self) -> list[T]:
        """Materialize every matching entity."""
        docs = await self._cursor().to_list(length=None)
        return [self._to_entity(doc) for doc in docs]

    async def first_or_default(self) -> T | None:
        """Return the first matching entity, or None."""
        docs = await self._cursor(limit=1).to_list(length=1)
        return self._to_entity(docs[0]) if docs else None

    async def single_or_default(self) -> T | None:
        """
        Return the only matching entity, or None when nothing matches.

        Raises:
            MultipleMatchesError: If more than one entity matches
        """
        docs = await self._cursor(limit=2).to_list(length=2)
        if len(docs) > 1:
            raise MultipleMatchesError(
                f"More than one {self._entity_class.__name__} matches the filter",
                entity_type=self._entity_class.__name__,
                filter=self._filter,
            )
        return self._to_entity(docs[0]) if docs else None

    async def any(self) -> bool:
        """Return whether at least one entity matches."""
        docs = await self._cursor(limit=1).to_list(length=1)
        return bool(docs)

    async def count(self) -> int:
        """Count matching entities, honouring skip and limit."""
        options: dict[str, int] = {}
        if self._skip > 0:
            options["skip"] = self._skip
        if self._limit > 0:
            options["limit"] = self._limit
        return await self._collection.count_documents(self._filter, **options)

    async def __aiter__(self) -> AsyncIterator[T]:
        async for doc in self._cursor():
            yield self._to_entity(doc)

    def __repr__(self) -> str:
        return (
            f"EntityQuery({self._entity_class.__name__}, filter={self._filter!r}, "
            f"sort={self._sort!r}, skip={self._skip}, limit={self._limit})"
        )
