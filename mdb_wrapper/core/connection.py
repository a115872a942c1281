"""
Connection setup for MDB_WRAPPER.

Builds the motor client and database handle from MongoDbSettings. The
client connects lazily; no network round-trip happens here.
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError as PyMongoConfigurationError

from ..config import MongoDbSettings
from ..constants import DEFAULT_APP_NAME
from ..exceptions import ConfigurationError
from ..observability import get_logger as get_contextual_logger

contextual_logger = get_contextual_logger(__name__)


def create_database(
    settings: MongoDbSettings,
) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    """
    Create a motor client and database handle.

    UUIDs are encoded with the standard binary representation and datetimes
    are returned timezone-aware, so entity ids and timestamps round-trip.

    Args:
        settings: Connection settings

    Returns:
        Tuple of (client, database)

    Raises:
        ConfigurationError: If settings are missing or invalid, or the
            connection string cannot be parsed
    """
    settings.validate()

    try:
        client = AsyncIOMotorClient(
            settings.connection_string,
            appname=DEFAULT_APP_NAME,
            maxPoolSize=settings.max_pool_size,
            minPoolSize=settings.min_pool_size,
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
            uuidRepresentation="standard",
            tz_aware=True,
        )
    except PyMongoConfigurationError as e:
        raise ConfigurationError(
            f"Invalid MongoDB connection string: {e}",
            config_key="connection_string",
        ) from e

    contextual_logger.info(
        "MongoDB client created",
        extra={
            "db_name": settings.database_name,
            "pool_size": f"{settings.min_pool_size}-{settings.max_pool_size}",
        },
    )
    return client, client[settings.database_name]
