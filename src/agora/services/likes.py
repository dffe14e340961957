"""Idempotent like/unlike on posts.

Both operations are one conditional update: the predicate on the likes set
decides whether anything happens, and the counter moves in the same
transaction as the set. A ``None`` result means the predicate did not match
(unknown post, or the like already present/absent). It is not an error.
"""
from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from agora.db.atomic import conditional_update
from agora.models.post import Post, PostLike

__all__ = ["add_like", "delete_like", "remove_user_likes"]

logger = logging.getLogger(__name__)


def _like_exists(post_id: int, user_id: int):
    return (
        select(PostLike)
        .where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        .exists()
    )


def _reload(db: Session, post_id: int) -> Post | None:
    return db.get(Post, post_id, populate_existing=True)


def add_like(db: Session, post_id: int, user_id: int) -> Post | None:
    """Add ``user_id`` to the likes of ``post_id``.

    Returns:
        The post after the update, or None if the post does not exist or the
        user already liked it.
    """
    stmt = (
        update(Post)
        .where(Post.id == post_id, ~_like_exists(post_id, user_id))
        .values(likes_count=Post.likes_count + 1)
    )
    matched = conditional_update(
        db,
        stmt,
        lambda: db.add(PostLike(post_id=post_id, user_id=user_id)),
    )
    if not matched:
        return None
    logger.debug("User %s liked post %s", user_id, post_id)
    return _reload(db, post_id)


def delete_like(db: Session, post_id: int, user_id: int) -> Post | None:
    """Remove ``user_id`` from the likes of ``post_id``.

    Returns:
        The post after the update, or None if the post does not exist or the
        user had not liked it.
    """
    stmt = (
        update(Post)
        .where(Post.id == post_id, _like_exists(post_id, user_id))
        .values(likes_count=Post.likes_count - 1)
    )
    matched = conditional_update(
        db,
        stmt,
        lambda: db.execute(
            delete(PostLike).where(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
            )
        ),
    )
    if not matched:
        return None
    logger.debug("User %s unliked post %s", user_id, post_id)
    return _reload(db, post_id)


def remove_user_likes(db: Session, user_id: int) -> None:
    """Withdraw every like ``user_id`` has given, one post at a time."""
    post_ids = db.scalars(select(PostLike.post_id).where(PostLike.user_id == user_id)).all()
    for post_id in post_ids:
        delete_like(db, post_id, user_id)
