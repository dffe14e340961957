# src/agora/models/__init__.py
"""SQLAlchemy models for the Agora application."""

from .post import Post, PostLike, PostMedia
from .user import FollowedEntry, FollowerEntry, User

__all__ = [
    "Post", "PostLike", "PostMedia",
    "User", "FollowedEntry", "FollowerEntry",
]
