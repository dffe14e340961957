"""Service-level helpers for creating, reading and deleting posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora.core.settings import settings
from agora.db.session import MAX_ID
from agora.errors import (
    InvalidParentError,
    MediaLimitError,
    MediaNotFoundError,
    PostNotFoundError,
)
from agora.models.post import Post, PostMedia

__all__ = [
    "create_post",
    "get_post",
    "get_media",
    "list_user_posts",
    "delete_post",
]


def create_post(
    db: Session,
    *,
    author_id: int,
    content: str,
    parent_id: int | None = None,
    media: Sequence[bytes] = (),
) -> Post:
    """Persist a new post.

    Args:
        db: Database session.
        author_id: Identifier of the authenticated author.
        content: Already validated text body.
        parent_id: Post being replied to, if any.
        media: Attachments, already converted by the image pipeline.

    Raises:
        InvalidParentError: If ``parent_id`` does not reference a post.
        MediaLimitError: If more attachments than allowed are supplied.
    """
    if len(media) > settings.max_post_media:
        raise MediaLimitError(
            f"A post can carry at most {settings.max_post_media} media attachments."
        )
    if parent_id is not None and db.get(Post, parent_id) is None:
        raise InvalidParentError()

    post = Post(author_id=author_id, content=content, parent_id=parent_id)
    post.media = [PostMedia(position=index, data=blob) for index, blob in enumerate(media)]
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def get_post(db: Session, post_id: int) -> Post:
    """Return a post by identifier.

    Raises:
        PostNotFoundError: If the post does not exist.
    """
    post = db.get(Post, post_id)
    if post is None:
        raise PostNotFoundError()
    return post


def get_media(db: Session, post_id: int, index: int) -> bytes:
    """Return the ``index``-th attachment of a post."""
    post = get_post(db, post_id)
    if not 0 <= index < len(post.media):
        raise MediaNotFoundError()
    return post.media[index].data


def list_user_posts(db: Session, author_id: int, page: int) -> list[Post]:
    """Return one page of posts written by ``author_id``, oldest first."""
    page_size = settings.posts_page_size
    if page * page_size > MAX_ID:
        return []
    result = db.scalars(
        select(Post)
        .where(Post.author_id == author_id)
        .order_by(Post.created_at, Post.id)
        .offset(page * page_size)
        .limit(page_size)
    )
    return list(result)


def delete_post(db: Session, post: Post) -> None:
    """Delete a post with its attachments and likes."""
    db.delete(post)
    db.commit()
