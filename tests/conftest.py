"""
Pytest configuration and shared fixtures for MDB_WRAPPER tests.

This module provides:
- In-memory database and facade fixtures
- Mock motor collection fixtures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorCollection

from mdb_wrapper.core.mongo_db import MongoDb
from mdb_wrapper.repositories.memory import InMemoryDatabase

# ============================================================================
# IN-MEMORY BACKEND FIXTURES
# ============================================================================


@pytest.fixture
def memory_database() -> InMemoryDatabase:
    """Create an empty in-memory database."""
    return InMemoryDatabase(name="test_db")


@pytest.fixture
def unacknowledged_database() -> InMemoryDatabase:
    """Create an in-memory database whose writes are never acknowledged."""
    return InMemoryDatabase(name="test_db", acknowledged=False)


@pytest.fixture
def db(memory_database: InMemoryDatabase) -> MongoDb:
    """Create a MongoDb facade over the in-memory database."""
    return MongoDb(database=memory_database)


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


@pytest.fixture
def mock_mongo_collection() -> MagicMock:
    """Create a mock motor collection."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "test_collection"
    collection.find = MagicMock(return_value=MagicMock(to_list=AsyncMock(return_value=[])))
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.replace_one = AsyncMock(return_value=MagicMock(acknowledged=True))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    collection.count_documents = AsyncMock(return_value=0)
    collection.create_index = AsyncMock(return_value="key_1")
    return collection


@pytest.fixture
def mock_mongo_database(mock_mongo_collection: MagicMock) -> MagicMock:
    """Create a mock motor database returning the same mock collection for every name."""
    database = MagicMock()
    database.name = "test_db"
    database.get_collection = MagicMock(return_value=mock_mongo_collection)
    return database
