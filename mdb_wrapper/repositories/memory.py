"""
In-memory storage backend.

Implements the subset of the motor database/collection API the MongoDb
facade uses, keeping documents in dictionaries. Useful for unit tests and
for host applications that want to run without a MongoDB server.

Usage:
    db = MongoDb(database=InMemoryDatabase())
"""

import copy
import logging
import uuid
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from ..constants import ID_FIELD

logger = logging.getLogger(__name__)

_MISSING = object()


def _get_path(document: dict[str, Any], path: str) -> Any:
    current: Any = document
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _equals(value: Any, expected: Any) -> bool:
    if value is _MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _compare(value: Any, operator: str, argument: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    try:
        if operator == "$gt":
            return value > argument
        if operator == "$gte":
            return value >= argument
        if operator == "$lt":
            return value < argument
        return value <= argument
    except TypeError:
        # Mismatched types never match, as in MongoDB
        return False


def _apply_operator(value: Any, operator: str, argument: Any) -> bool:
    if operator == "$eq":
        return _equals(value, argument)
    if operator == "$ne":
        return not _equals(value, argument)
    if operator in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(value, operator, argument)
    if operator == "$in":
        return any(_equals(value, item) for item in argument)
    if operator == "$nin":
        return not any(_equals(value, item) for item in argument)
    if operator == "$exists":
        return (value is not _MISSING) == bool(argument)
    if operator == "$not":
        return not _match_condition(value, argument)
    raise ValueError(f"Unsupported query operator: {operator}")


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, dict)
        and bool(condition)
        and all(key.startswith("$") for key in condition)
    )


def _match_condition(value: Any, condition: Any) -> bool:
    if _is_operator_document(condition):
        return all(
            _apply_operator(value, operator, argument) for operator, argument in condition.items()
        )
    return _equals(value, condition)


def matches_filter(document: dict[str, Any], filter: dict[str, Any] | None) -> bool:
    """
    Evaluate a MongoDB filter document against a document.

    Supports field equality (dotted paths included) and the operators
    $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin, $exists, $not, $and, $or, $nor.

    Raises:
        ValueError: If the filter uses an unsupported operator
    """
    for key, condition in (filter or {}).items():
        if key == "$and":
            if not all(matches_filter(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches_filter(document, sub) for sub in condition):
                return False
        elif key == "$nor":
            if any(matches_filter(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise ValueError(f"Unsupported query operator: {key}")
        elif not _match_condition(_get_path(document, key), condition):
            return False
    return True


def _type_rank(value: Any) -> int:
    # MongoDB comparison order across BSON types
    if value is _MISSING or value is None:
        return 1
    if isinstance(value, bool):
        return 8
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, str):
        return 3
    if isinstance(value, dict):
        return 4
    if isinstance(value, (list, tuple)):
        return 5
    if isinstance(value, (bytes, uuid.UUID)):
        return 6
    if isinstance(value, ObjectId):
        return 7
    if isinstance(value, datetime):
        return 9
    return 10


def _sort_key(field: str):
    def key(document: dict[str, Any]) -> tuple:
        value = _get_path(document, field)
        rank = _type_rank(value)
        if rank == 1:
            return (rank, 0)
        if rank == 4:
            return (rank, repr(sorted(value.items(), key=lambda item: item[0])))
        if rank == 6 and isinstance(value, uuid.UUID):
            return (rank, value.bytes)
        if rank == 10:
            return (rank, repr(value))
        return (rank, value)

    return key


class InMemoryCursor:
    """Lazy cursor over an InMemoryCollection, evaluated on iteration."""

    def __init__(self, collection: "InMemoryCollection", filter: dict[str, Any] | None):
        self._collection = collection
        self._filter = filter or {}
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: str | list[tuple[str, int]], direction: int | None = None):
        if isinstance(key_or_list, str):
            self._sort.append((key_or_list, direction or ASCENDING))
        else:
            self._sort.extend(key_or_list)
        return self

    def skip(self, count: int):
        self._skip = count
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def _evaluate(self) -> list[dict[str, Any]]:
        documents = self._collection._matching(self._filter)
        # Stable sorts applied from the least significant key
        for field, direction in reversed(self._sort):
            documents.sort(key=_sort_key(field), reverse=direction < 0)
        documents = documents[self._skip :]
        if self._limit > 0:
            documents = documents[: self._limit]
        return [copy.deepcopy(doc) for doc in documents]

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        documents = self._evaluate()
        if length is not None:
            documents = documents[:length]
        return documents

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        for document in self._evaluate():
            yield document


class InMemoryCollection:
    """
    Dictionary-backed collection with a motor-compatible coroutine API.

    Write results are real pymongo result objects. With
    ``acknowledged=False`` writes are applied but reported unacknowledged,
    as with a ``w=0`` write concern.
    """

    def __init__(self, name: str, acknowledged: bool = True):
        self.name = name
        self._acknowledged = acknowledged
        self._documents: dict[Any, dict[str, Any]] = {}
        self._indexes: dict[str, list[tuple[str, int]]] = {}
        self._unique_fields: set[str] = set()

    def _matching(self, filter: dict[str, Any] | None) -> list[dict[str, Any]]:
        return [doc for doc in self._documents.values() if matches_filter(doc, filter)]

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        if ID_FIELD not in document:
            document[ID_FIELD] = ObjectId()
        document_id = document[ID_FIELD]
        if document_id in self._documents:
            raise DuplicateKeyError(
                f"E11000 duplicate key error collection: {self.name} dup key: {{ _id: {document_id!r} }}"
            )
        self._check_unique(document, document_id)
        self._documents[document_id] = copy.deepcopy(document)
        return InsertOneResult(document_id, self._acknowledged)

    async def find_one(
        self, filter: dict[str, Any] | None = None, projection: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        for doc in self._documents.values():
            if matches_filter(doc, filter):
                return self._project(copy.deepcopy(doc), projection)
        return None

    def find(self, filter: dict[str, Any] | None = None) -> InMemoryCursor:
        return InMemoryCursor(self, filter)

    async def count_documents(self, filter: dict[str, Any], skip: int = 0, limit: int = 0) -> int:
        count = max(len(self._matching(filter)) - skip, 0)
        if limit > 0:
            count = min(count, limit)
        return count

    async def replace_one(
        self, filter: dict[str, Any], replacement: dict[str, Any]
    ) -> UpdateResult:
        for document_id, doc in self._documents.items():
            if matches_filter(doc, filter):
                new_doc = copy.deepcopy(replacement)
                new_doc[ID_FIELD] = document_id
                self._check_unique(new_doc, document_id)
                modified = 0 if new_doc == doc else 1
                self._documents[document_id] = new_doc
                return UpdateResult({"n": 1, "nModified": modified}, self._acknowledged)
        return UpdateResult({"n": 0, "nModified": 0}, self._acknowledged)

    async def update_one(
        self, filter: dict[str, Any], update: dict[str, Any], upsert: bool = False
    ) -> UpdateResult:
        unsupported = set(update) - {"$set", "$setOnInsert"}
        if unsupported:
            raise ValueError(f"Unsupported update operators: {sorted(unsupported)}")

        changes = copy.deepcopy(update.get("$set", {}))
        for document_id, doc in self._documents.items():
            if matches_filter(doc, filter):
                self._check_unique({**doc, **changes}, document_id)
                modified = 0 if all(doc.get(k, _MISSING) == v for k, v in changes.items()) else 1
                doc.update(changes)
                return UpdateResult({"n": 1, "nModified": modified}, self._acknowledged)

        if not upsert:
            return UpdateResult({"n": 0, "nModified": 0}, self._acknowledged)

        # New document seeded from the filter's equality conditions
        new_doc = {
            k: copy.deepcopy(v)
            for k, v in (filter or {}).items()
            if not k.startswith("$") and "." not in k and not _is_operator_document(v)
        }
        new_doc.update(copy.deepcopy(update.get("$setOnInsert", {})))
        new_doc.update(changes)
        new_doc.setdefault(ID_FIELD, ObjectId())
        self._check_unique(new_doc, None)
        self._documents[new_doc[ID_FIELD]] = new_doc
        return UpdateResult(
            {"n": 1, "nModified": 0, "upserted": new_doc[ID_FIELD]}, self._acknowledged
        )

    async def create_index(
        self, keys: str | list[tuple[str, int]], unique: bool = False, **kwargs
    ) -> str:
        """Record an index; unique single-field indexes are enforced on writes."""
        if isinstance(keys, str):
            keys = [(keys, ASCENDING)]
        name = kwargs.get("name") or "_".join(f"{field}_{direction}" for field, direction in keys)
        if unique and len(keys) == 1:
            self._unique_fields.add(keys[0][0])
        self._indexes[name] = list(keys)
        return name

    def _check_unique(self, document: dict[str, Any], document_id: Any) -> None:
        for field in self._unique_fields:
            value = _get_path(document, field)
            for other_id, other in self._documents.items():
                if other_id != document_id and _get_path(other, field) == value:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {self.name} "
                        f"index: {field}_1 dup key: {{ {field}: {value!r} }}"
                    )

    async def delete_one(self, filter: dict[str, Any]) -> DeleteResult:
        for document_id, doc in self._documents.items():
            if matches_filter(doc, filter):
                del self._documents[document_id]
                return DeleteResult({"n": 1}, self._acknowledged)
        return DeleteResult({"n": 0}, self._acknowledged)

    async def delete_many(self, filter: dict[str, Any]) -> DeleteResult:
        doomed = [
            document_id
            for document_id, doc in self._documents.items()
            if matches_filter(doc, filter)
        ]
        for document_id in doomed:
            del self._documents[document_id]
        return DeleteResult({"n": len(doomed)}, self._acknowledged)

    @staticmethod
    def _project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
        if not projection:
            return doc
        included = {k for k, v in projection.items() if v}
        if not included:
            return {k: v for k, v in doc.items() if k not in projection}
        included.add(ID_FIELD)
        if not projection.get(ID_FIELD, True):
            included.discard(ID_FIELD)
        return {k: v for k, v in doc.items() if k in included}

    def __len__(self) -> int:
        return len(self._documents)


class InMemoryDatabase:
    """Dictionary of InMemoryCollection objects, created on first access."""

    def __init__(self, name: str = "memory", acknowledged: bool = True):
        self.name = name
        self._acknowledged = acknowledged
        self._collections: dict[str, InMemoryCollection] = {}

    def get_collection(self, name: str) -> InMemoryCollection:
        collection = self._collections.get(name)
        if collection is None:
            logger.debug(f"Creating in-memory collection '{name}' in '{self.name}'")
            collection = InMemoryCollection(name, acknowledged=self._acknowledged)
            self._collections[name] = collection
        return collection

    def __getitem__(self, name: str) -> InMemoryCollection:
        return self.get_collection(name)

    async def list_collection_names(self) -> list[str]:
        return list(self._collections)

    async def drop_collection(self, name: str) -> None:
        self._collections.pop(name, None)
