# src/agora/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import LoginRequest, TokenResponse
from .post import LikeRequest, PostCreate, PostResponse, PostSummary
from .user import PasswordChangeRequest, ProfileUpdateRequest, SignupRequest, UserPublic

__all__ = [
    "LoginRequest", "TokenResponse",
    "LikeRequest", "PostCreate", "PostResponse", "PostSummary",
    "PasswordChangeRequest", "ProfileUpdateRequest", "SignupRequest", "UserPublic",
]
