import logging
from pymongo import MongoClient
from pymongo.collection import Collection

from docdb_demo.errors import translate_errors
from docdb_demo.models.options import ClientOptions

logger = logging.getLogger(__name__)


def create_client(options: ClientOptions) -> MongoClient:
    """
    Create a MongoDB client and verify the server is reachable

    Args:
        options: Immutable connection configuration

    Returns:
        MongoClient: Connected client, owned by the caller

    Raises:
        DatabaseConnectionError: If the server cannot be reached
        ConfigurationError: If the URI is malformed or its SRV record does not resolve
    """
    kwargs = options.to_client_kwargs()
    logger.info(
        f"Connecting with write concern {options.write_concern.value}"
        f" (wtimeout {options.write_concern_timeout_ms}ms),"
        f" read concern {options.read_concern.value},"
        f" compressors {list(options.compressors)}"
    )

    client = None
    try:
        with translate_errors("connect"):
            # URI parsing and SRV lookup happen in the constructor
            client = MongoClient(options.uri, **kwargs)
            # The constructor connects lazily; ping so failures surface here
            client.admin.command("ping")
    except Exception:
        if client is not None:
            client.close()
        raise

    logger.info("MongoDB client connected")
    return client


def get_collection(client: MongoClient, database: str, collection: str) -> Collection:
    """Get a collection handle from an explicitly passed client"""
    return client[database][collection]


def close_client(client: MongoClient) -> None:
    """Release the connection pool"""
    client.close()
    logger.info("MongoDB client closed")
