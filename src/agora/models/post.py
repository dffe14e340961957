# src/agora/models/post.py
"""SQLAlchemy models for posts, their attachments and likes."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agora.db.session import Base


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class Post(Base):
    """Short text update authored by a user, optionally replying to another post."""

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("likes_count >= 0", name="ck_post_likes_count"),
        Index("ix_post_author_id", "author_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Reply target; existence is checked at creation time only.
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Denormalized size of the likes set.
    likes_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    media: Mapped[list[PostMedia]] = relationship(
        "PostMedia",
        cascade="all, delete-orphan",
        order_by="PostMedia.position",
    )
    like_entries: Mapped[list[PostLike]] = relationship(
        "PostLike",
        cascade="all, delete-orphan",
        order_by="PostLike.user_id",
    )

    @property
    def likes(self) -> list[int]:
        """Return identifiers of the users who liked this post."""
        return [entry.user_id for entry in self.like_entries]

    @property
    def media_count(self) -> int:
        """Return how many attachments the post carries."""
        return len(self.media)


class PostMedia(Base):
    """Binary attachment of a post (WebP encoded)."""

    __tablename__ = "post_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


class PostLike(Base):
    """Member of a post's ``likes`` set.

    The composite primary key keeps the set free of duplicates.
    """

    __tablename__ = "post_like"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
