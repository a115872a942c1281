"""
Configuration management for MDB_WRAPPER.

Settings can be passed directly or picked up from environment variables.
The MongoDb facade validates them at construction and fails fast when the
connection string or database name is missing.
"""

import os

from .constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


class MongoDbSettings:
    """
    MongoDB connection settings.

    Example:
        # Using environment variables
        settings = MongoDbSettings()
        db = MongoDb(settings)

        # Or using direct parameters
        settings = MongoDbSettings(
            connection_string="mongodb://localhost:27017",
            database_name="my_db",
        )
    """

    def __init__(
        self,
        connection_string: str | None = None,
        database_name: str | None = None,
        max_pool_size: int | None = None,
        min_pool_size: int | None = None,
        server_selection_timeout_ms: int | None = None,
    ):
        """
        Initialize settings.

        Args:
            connection_string: MongoDB connection URI (defaults to MONGO_URI env var)
            database_name: Database name (defaults to DB_NAME env var)
            max_pool_size: Maximum connection pool size (defaults to MONGO_MAX_POOL_SIZE or 50)
            min_pool_size: Minimum connection pool size (defaults to MONGO_MIN_POOL_SIZE or 0)
            server_selection_timeout_ms: Server selection timeout in ms
                (defaults to MONGO_SERVER_SELECTION_TIMEOUT_MS or 5000)
        """
        self.connection_string = connection_string or os.getenv("MONGO_URI", "")
        self.database_name = database_name or os.getenv("DB_NAME", "")
        self.max_pool_size = _resolve_int(
            max_pool_size, "MONGO_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE
        )
        self.min_pool_size = _resolve_int(
            min_pool_size, "MONGO_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE
        )
        self.server_selection_timeout_ms = _resolve_int(
            server_selection_timeout_ms,
            "MONGO_SERVER_SELECTION_TIMEOUT_MS",
            DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.connection_string:
            raise ConfigurationError(
                "connection_string is required "
                "(set MONGO_URI environment variable or pass directly)",
                config_key="connection_string",
            )

        if not self.database_name:
            raise ConfigurationError(
                "database_name is required (set DB_NAME environment variable or pass directly)",
                config_key="database_name",
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 0:
            raise ConfigurationError(
                f"min_pool_size must be >= 0, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < 1:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

    def __repr__(self) -> str:
        return (
            f"MongoDbSettings(database_name={self.database_name!r}, "
            f"max_pool_size={self.max_pool_size}, min_pool_size={self.min_pool_size})"
        )


def _resolve_int(value: int | None, env_var: str, default: int) -> int:
    if value is not None:
        return value
    raw = os.getenv(env_var)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{env_var} must be an integer, got {raw!r}",
            config_key=env_var,
            config_value=raw,
        ) from e
