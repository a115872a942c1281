"""
Constants for MDB_WRAPPER.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# REPOSITORY CONSTANTS
# ============================================================================

DELETE_BATCH_SIZE: Final[int] = 50
"""Number of soft deletes issued concurrently per batch in delete_many."""

KEYS_COLLECTION_NAME: Final[str] = "Keys"
"""Collection holding the key/value overlay records."""

DELETED_FIELD: Final[str] = "deleted"
"""Document field carrying the soft-delete flag."""

ID_FIELD: Final[str] = "_id"
"""Document field carrying the entity id."""

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

# Connection pool defaults
DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 0
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_APP_NAME: Final[str] = "MDB_WRAPPER"
"""Application name reported to the MongoDB server."""

KEY_FIELD: Final[str] = "key"
"""Document field carrying the key of a key/value record."""
