from datetime import datetime, timedelta
import logging

from pymongo import ReturnDocument

from models.posts import Post
from util.dates_utils import relative_time
from util.errors_utils import NotFoundError, POST_NOT_FOUND
from util.mongodb_utils import POSTS_COLLECTION, COMMENTS_COLLECTION, to_object_id

logger = logging.getLogger(__name__)

SAMPLE_POST_AUTHOR = "Zvuk"
SAMPLE_POST_TEXT = "Thread text about the product / development"
SAMPLE_POST_TITLE = "Product thread"
# hours before "now" each sample post claims to have been written
SAMPLE_POST_AGES = [4, 6, 7]


def build_sample_posts(include_title=False, now=None):
    """Fixed sample set written by reseed_posts."""
    if now is None:
        now = datetime.now()
    posts = []
    for hours in SAMPLE_POST_AGES:
        post = Post(
            author=SAMPLE_POST_AUTHOR,
            date=relative_time(now - timedelta(hours=hours), now=now),
            title=SAMPLE_POST_TITLE if include_title else None,
            text=SAMPLE_POST_TEXT,
            commentCount=0,
        )
        posts.append(post.model_dump(by_alias=True, exclude_none=True))
    return posts


async def list_posts(db):
    return await db[POSTS_COLLECTION].find({}).to_list(length=None)


async def get_post(db, post_id):
    """
    Fetch one post by id.

    Ids that are not well formed are treated exactly like missing posts.

    Raises:
        NotFoundError: no post with that id
    """
    oid = to_object_id(post_id)
    if oid is None:
        raise NotFoundError(POST_NOT_FOUND)
    post = await db[POSTS_COLLECTION].find_one({"_id": oid})
    if not post:
        raise NotFoundError(POST_NOT_FOUND)
    return post


async def reseed_posts(db, include_title=False):
    """
    Destructively replace the posts collection with the sample set.

    Comments that referenced the old posts are left in place.

    Returns:
        int: number of posts inserted
    """
    posts_coll = db[POSTS_COLLECTION]
    deleted = await posts_coll.delete_many({})
    logger.info(f"Deleted {deleted.deleted_count} posts before reseed")

    result = await posts_coll.insert_many(build_sample_posts(include_title=include_title))
    logger.info(f"Inserted {len(result.inserted_ids)} sample posts")
    return len(result.inserted_ids)


async def increment_comment_count(db, post_id):
    """Atomically add one to the post's commentCount. Returns the updated post or None."""
    return await db[POSTS_COLLECTION].find_one_and_update(
        {"_id": post_id},
        {"$inc": {"commentCount": 1}},
        return_document=ReturnDocument.AFTER,
    )


async def decrement_comment_count(db, post_id):
    """
    Atomically subtract one from the post's commentCount.

    Posts already at zero and posts that no longer exist are left alone.
    """
    updated = await db[POSTS_COLLECTION].find_one_and_update(
        {"_id": post_id, "commentCount": {"$gt": 0}},
        {"$inc": {"commentCount": -1}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        logger.info(f"Skipped commentCount decrement for post {post_id}")
    return updated


async def recount_comments(db, post_id=None):
    """
    Recompute commentCount from the comments collection.

    Args:
        db: async database
        post_id: restrict to one post, all posts when None

    Returns:
        dict: {post id (str): comment count}
    """
    query = {}
    if post_id is not None:
        oid = to_object_id(post_id)
        if oid is None:
            raise NotFoundError(POST_NOT_FOUND)
        query = {"_id": oid}

    counts = {}
    posts = await db[POSTS_COLLECTION].find(query, {"_id": 1}).to_list(length=None)
    if post_id is not None and not posts:
        raise NotFoundError(POST_NOT_FOUND)

    for post in posts:
        count = await db[COMMENTS_COLLECTION].count_documents({"postId": post["_id"]})
        await db[POSTS_COLLECTION].update_one(
            {"_id": post["_id"]},
            {"$set": {"commentCount": count}}
        )
        counts[str(post["_id"])] = count

    logger.info(f"Recounted comments for {len(counts)} posts")
    return counts
