# src/agora/services/__init__.py
"""Business logic services for the Agora application."""

from . import credentials, images, likes, post_service, relationships, user_service
from .likes import add_like, delete_like
from .password_policy import PolicyViolation, validate_password
from .relationships import follow, unfollow

__all__ = [
    "credentials",
    "images",
    "likes",
    "post_service",
    "relationships",
    "user_service",
    "add_like",
    "delete_like",
    "follow",
    "unfollow",
    "PolicyViolation",
    "validate_password",
]
