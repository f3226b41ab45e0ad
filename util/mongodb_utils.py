"""
MongoDB Database Utility Module

This module provides the connection helpers for the forum database: building the
connection URI from the environment, sync clients for maintenance scripts, async
clients for the API, and identifier coercion for `_id` lookups.
"""

import os
import logging
from typing import Optional
from urllib.parse import quote_plus

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

POSTS_COLLECTION = "posts"
COMMENTS_COLLECTION = "comments"


def get_db_name(base_name=None):
    """
    Returns the appropriate database name based on environment setting.

    Args:
        base_name (str): The base database name, defaults to MONGODB_DBNAME

    Returns:
        str: The actual database name to use (with "_dev" suffix if in dev mode)
    """
    if base_name is None:
        base_name = os.getenv("MONGODB_DBNAME", "forum")
    use_dev = os.getenv("USE_DEV_MONGO_DB", "False").lower() == "true"
    if use_dev:
        dev_name = f"{base_name}_dev"
        logger.debug(f"Using development database: {dev_name}")
        return dev_name
    return base_name


def build_mongo_uri():
    """
    Build the MongoDB connection URI.

    MONGO_DB_URL wins when set; otherwise the URI is assembled from
    MONGODB_HOST, MONGODB_PORT, MONGODB_USERNAME, MONGODB_PASSWORD and
    MONGODB_DBNAME.

    Returns:
        str: MongoDB connection URI
    """
    mongo_uri = os.getenv("MONGO_DB_URL")
    if mongo_uri:
        return mongo_uri

    host = os.getenv("MONGODB_HOST", "localhost")
    port = os.getenv("MONGODB_PORT", "27017")
    db_name = os.getenv("MONGODB_DBNAME", "forum")
    username = os.getenv("MONGODB_USERNAME")
    password = os.getenv("MONGODB_PASSWORD", "")

    credentials = ""
    if username:
        credentials = f"{quote_plus(username)}:{quote_plus(password)}@"

    return (
        f"mongodb://{credentials}{host}:{port}/{db_name}"
        "?authSource=admin&directConnection=true"
    )


def get_mongo_client(timeout_ms=30000, connect_timeout_ms=30000, socket_timeout_ms=60000):
    """
    Get MongoDB client with appropriate connection settings.

    Args:
        timeout_ms (int): Server selection timeout in milliseconds
        connect_timeout_ms (int): Connection timeout in milliseconds
        socket_timeout_ms (int): Socket timeout in milliseconds

    Returns:
        MongoClient: Configured MongoDB client
    """
    return MongoClient(
        build_mongo_uri(),
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=connect_timeout_ms,
        socketTimeoutMS=socket_timeout_ms
    )


def get_database(base_name=None):
    """Get the sync forum database, used by the maintenance scripts."""
    client = get_mongo_client()
    return client[get_db_name(base_name)]


def get_mongo_collection(collection_name, db_name=None):
    """
    Get MongoDB collection with automatic database selection.

    Args:
        collection_name (str): Name of the collection to access
        db_name (str): Base name of the database

    Returns:
        Collection: MongoDB collection object
    """
    db = get_database(db_name)
    return db[collection_name]


def get_async_mongo_client(timeout_ms=30000):
    """
    Get async MongoDB client with appropriate connection settings.

    Args:
        timeout_ms (int): Server selection timeout in milliseconds

    Returns:
        AsyncIOMotorClient: Configured async MongoDB client
    """
    return AsyncIOMotorClient(
        build_mongo_uri(),
        serverSelectionTimeoutMS=timeout_ms
    )


def get_async_database(base_name=None):
    """
    Get appropriate async MongoDB database based on environment setting.

    Args:
        base_name (str): The base database name

    Returns:
        MotorDatabase: Async MongoDB database object
    """
    client = get_async_mongo_client()
    db_name = get_db_name(base_name)
    logger.info(f"Using MongoDB database: {db_name}")
    return client[db_name]


def to_object_id(value) -> Optional[ObjectId]:
    """Coerce a client supplied id to ObjectId, None when it is not well formed."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
