import logging

from pymongo import ReturnDocument

from models.comments import Comment
from services.posts_services import get_post, increment_comment_count, decrement_comment_count
from util.errors_utils import NotFoundError, COMMENT_NOT_FOUND
from util.mongodb_utils import COMMENTS_COLLECTION, to_object_id

logger = logging.getLogger(__name__)


def _comment_oid(comment_id):
    oid = to_object_id(comment_id)
    if oid is None:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return oid


async def list_comments_for_post(db, post_id):
    """Comments whose postId matches. Unknown or malformed post ids give an empty list."""
    oid = to_object_id(post_id)
    if oid is None:
        return []
    return await db[COMMENTS_COLLECTION].find({"postId": oid}).to_list(length=None)


async def list_all_comments(db):
    return await db[COMMENTS_COLLECTION].find({}).to_list(length=None)


async def get_comment(db, comment_id):
    comment = await db[COMMENTS_COLLECTION].find_one({"_id": _comment_oid(comment_id)})
    if not comment:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return comment


async def create_comment(db, author, text, post_id):
    """
    Create a comment under an existing post and bump the post's commentCount.

    The counter update is a second write. If it fails the comment is kept and
    the failure is only logged, so creation never fails because of the counter.

    Raises:
        NotFoundError: post_id does not reference an existing post
    """
    post = await get_post(db, post_id)

    comment = Comment(postId=post["_id"], author=author, text=text)
    comment_dict = comment.model_dump(by_alias=True)
    result = await db[COMMENTS_COLLECTION].insert_one(comment_dict)
    comment_dict["_id"] = result.inserted_id
    logger.info(f"Created comment {result.inserted_id} on post {post['_id']}")

    try:
        await increment_comment_count(db, post["_id"])
    except Exception as e:
        logger.error(f"Failed to increment commentCount for post {post['_id']}: {e}")

    return comment_dict


async def update_comment_text(db, comment_id, text):
    updated = await db[COMMENTS_COLLECTION].find_one_and_update(
        {"_id": _comment_oid(comment_id)},
        {"$set": {"text": text}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return updated


async def delete_comment(db, comment_id):
    """
    Delete a comment and decrement its post's commentCount.

    A missing parent post is skipped silently; counter failures are logged.
    """
    deleted = await db[COMMENTS_COLLECTION].find_one_and_delete({"_id": _comment_oid(comment_id)})
    if not deleted:
        raise NotFoundError(COMMENT_NOT_FOUND)
    logger.info(f"Deleted comment {deleted['_id']}")

    post_id = deleted.get("postId")
    if post_id is not None:
        try:
            await decrement_comment_count(db, post_id)
        except Exception as e:
            logger.error(f"Failed to decrement commentCount for post {post_id}: {e}")

    return deleted


async def like_comment(db, comment_id, user_id):
    """
    Record a like from user_id.

    The set insert and the counter increment are one store-side update that only
    matches when the user has not liked the comment yet, so likeCount always
    equals len(likedBy). A repeated like returns the comment unchanged.
    """
    oid = _comment_oid(comment_id)
    updated = await db[COMMENTS_COLLECTION].find_one_and_update(
        {"_id": oid, "likedBy": {"$ne": user_id}},
        {"$addToSet": {"likedBy": user_id}, "$inc": {"likeCount": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if updated:
        return updated
    return await get_comment(db, oid)


async def unlike_comment(db, comment_id, user_id):
    """Remove user_id's like. No-op when the user never liked the comment."""
    oid = _comment_oid(comment_id)
    updated = await db[COMMENTS_COLLECTION].find_one_and_update(
        {"_id": oid, "likedBy": user_id},
        {"$pull": {"likedBy": user_id}, "$inc": {"likeCount": -1}},
        return_document=ReturnDocument.AFTER,
    )
    if updated:
        return updated
    return await get_comment(db, oid)
