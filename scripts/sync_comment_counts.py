#!/usr/bin/env python
"""Recompute every post's commentCount from the comments collection.

Counter writes that follow comment creation/deletion are best effort, so a
failed write leaves commentCount out of step with the real number of comments.
This script repairs that drift.

Usage examples:
    # Dry-run: only log posts whose counter is wrong
    python scripts/sync_comment_counts.py

    # Write the corrected counters
    python scripts/sync_comment_counts.py --execute
"""

import os
import sys
import argparse
import logging
from typing import Dict

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from util.mongodb_utils import get_mongo_collection, POSTS_COLLECTION, COMMENTS_COLLECTION

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger('sync_comment_counts')


def count_comments_by_post(comments_col) -> Dict:
    pipeline = [
        {"$group": {"_id": "$postId", "count": {"$sum": 1}}},
    ]
    return {row["_id"]: row["count"] for row in comments_col.aggregate(pipeline)}


def sync_comment_counts(posts_col, comments_col, execute=False) -> int:
    """
    Compare stored counters with real counts.

    Returns:
        int: number of posts whose counter was (or would be) corrected
    """
    actual = count_comments_by_post(comments_col)
    fixed = 0
    for post in posts_col.find({}, {"_id": 1, "commentCount": 1}):
        expected = actual.get(post["_id"], 0)
        stored = post.get("commentCount", 0)
        if stored == expected:
            continue
        fixed += 1
        logger.info(f"Post {post['_id']}: commentCount {stored} -> {expected}")
        if execute:
            posts_col.update_one({"_id": post["_id"]}, {"$set": {"commentCount": expected}})

    if not execute and fixed:
        logger.info("Dry-run only, re-run with --execute to apply")
    return fixed


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recompute post comment counters")
    parser.add_argument("--execute", action="store_true", help="Apply changes (default dry-run)")
    args = parser.parse_args()

    fixed = sync_comment_counts(
        get_mongo_collection(POSTS_COLLECTION),
        get_mongo_collection(COMMENTS_COLLECTION),
        execute=args.execute,
    )
    logger.info(f"{fixed} posts with drifted commentCount")
