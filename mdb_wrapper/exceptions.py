"""
Custom exceptions for MDB_WRAPPER.

These exceptions provide more specific error types while maintaining
backward compatibility with RuntimeError.
"""

from typing import Any, Dict, Optional


class MongoWrapperError(RuntimeError):
    """
    Base exception for MDB_WRAPPER errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (entity_type,
                 collection_name, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(MongoWrapperError):
    """
    Raised when configuration is invalid or missing.

    This exception is raised at construction time when the connection
    string, database name or another setting is missing or invalid.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class EntityNotFoundError(MongoWrapperError):
    """
    Raised when an id-addressed mutation targets an entity that does not exist.

    Delete, restore and replace of an existing entity raise this error;
    hard deletes never do.

    Attributes:
        message: Error message
        entity_type: Name of the entity type
        entity_id: Id that was looked up
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if entity_type:
            context["entity_type"] = entity_type
        if entity_id is not None:
            context["entity_id"] = entity_id
        super().__init__(message, context=context)
        self.entity_type = entity_type
        self.entity_id = entity_id


class MultipleMatchesError(MongoWrapperError):
    """
    Raised when a single-result query matches more than one document.

    Attributes:
        message: Error message
        entity_type: Name of the entity type
        filter: Filter document that matched more than once
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        filter: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if entity_type:
            context["entity_type"] = entity_type
        if filter is not None:
            context["filter"] = filter
        super().__init__(message, context=context)
        self.entity_type = entity_type
        self.filter = filter


class StorageFailure(MongoWrapperError):
    """
    Raised when the backend does not acknowledge a write that must succeed.

    Driver errors (pymongo.errors.PyMongoError) are not wrapped; they
    propagate unchanged.

    Attributes:
        message: Error message
        operation: Backend operation that failed (insert_one, ...)
        collection_name: Collection the operation targeted
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection_name:
            context["collection_name"] = collection_name
        super().__init__(message, context=context)
        self.operation = operation
        self.collection_name = collection_name
