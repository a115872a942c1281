"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

import uuid

import pytest

from mdb_wrapper.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MongoWrapperError,
    MultipleMatchesError,
    StorageFailure,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    @pytest.mark.parametrize(
        "error_cls",
        [ConfigurationError, EntityNotFoundError, MultipleMatchesError, StorageFailure],
    )
    def test_errors_share_base(self, error_cls):
        error = error_cls("failed")
        assert isinstance(error, MongoWrapperError)
        assert isinstance(error, RuntimeError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_base_error_message(self):
        error = MongoWrapperError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.context == {}

    def test_base_error_with_context(self):
        error = MongoWrapperError("Something went wrong", context={"collection": "Person"})
        assert str(error) == "Something went wrong (context: collection=Person)"

    def test_configuration_error_with_key(self):
        error = ConfigurationError("Invalid value", config_key="max_pool_size", config_value=-1)
        assert error.config_key == "max_pool_size"
        assert error.config_value == -1
        assert error.context == {"config_key": "max_pool_size", "config_value": -1}

    def test_entity_not_found_error(self):
        entity_id = uuid.uuid4()
        error = EntityNotFoundError("missing", entity_type="Person", entity_id=entity_id)
        assert error.entity_type == "Person"
        assert error.entity_id == entity_id
        assert f"entity_id={entity_id}" in str(error)

    def test_multiple_matches_error(self):
        error = MultipleMatchesError("too many", entity_type="Person", filter={"age": 1})
        assert error.filter == {"age": 1}
        assert "entity_type=Person" in str(error)

    def test_storage_failure(self):
        error = StorageFailure("not acknowledged", operation="insert_one", collection_name="Keys")
        assert error.operation == "insert_one"
        assert error.collection_name == "Keys"
