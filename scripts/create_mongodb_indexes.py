#!/usr/bin/env python
"""
MongoDB Index Creation Script for the forum database

Creates the postId lookup index on the comments collection. Comments are
listed and counted per post, and the store enforces no foreign key between
comments and posts, so this index is what backs that relationship.
"""

import logging
import time
import os
import sys
from pymongo.errors import OperationFailure

# Add the project root to the path to import the utility module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from util.mongodb_utils import get_mongo_client, get_db_name, COMMENTS_COLLECTION

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_index_safely(collection, index_spec, index_name=None, unique=False):
    """
    Create an index on a collection in a safe manner.

    Args:
        collection: MongoDB collection
        index_spec: Index specification
        index_name: Optional name for the index
        unique: Whether the index should enforce uniqueness

    Returns:
        str: Name of the created index or None if creation failed
    """
    start_time = time.time()
    options = {}

    if index_name:
        options["name"] = index_name

    if unique:
        options["unique"] = True

    try:
        result = collection.create_index(index_spec, **options)
        end_time = time.time()
        logger.info(
            f"Created index '{result}' on {collection.name} "
            f"with spec {index_spec} in {end_time - start_time:.2f}s"
        )
        return result
    except OperationFailure as e:
        logger.error(f"Failed to create index on {collection.name}: {str(e)}")
        return None


def create_all_indexes(client=None):
    """Create all indexes for the forum collections."""
    own_client = client is None
    if own_client:
        client = get_mongo_client()
    db = client[get_db_name()]

    try:
        logger.info("Creating index on comments collection for postId field...")
        return create_index_safely(
            db[COMMENTS_COLLECTION],
            [("postId", 1)],
            "idx_comments_post_id"
        )
    finally:
        if own_client:
            client.close()


if __name__ == "__main__":
    logger.info("Starting index creation for forum database")
    create_all_indexes()
    logger.info("Index creation operation completed")
