# src/agora/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from agora.db.session import MAX_ID


class PostCreate(BaseModel):
    """Schema for the text part of a new post (attachments travel as files)."""

    content: str = Field(..., min_length=2, max_length=1000, description="Post text")
    parent_id: int | None = Field(None, ge=1, le=MAX_ID, description="Post being replied to")

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: object) -> object:
        """Trim surrounding whitespace before length checks."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("parent_id", mode="before")
    @classmethod
    def parse_parent(cls, v: object) -> object:
        """Treat an empty form field as no parent and reject malformed ids."""
        if v is None or v == "":
            return None
        if isinstance(v, str) and not (v.isascii() and v.isdecimal()):
            raise ValueError("Parent is invalid")
        return v


class PostResponse(BaseModel):
    """Full post as returned after creation or lookup."""

    id: int
    author_id: int
    content: str
    parent_id: int | None
    likes: list[int]
    likes_count: int
    media_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    """Post listing entry; omits attachments and the likes set."""

    id: int
    content: str
    parent_id: int | None
    likes_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeRequest(BaseModel):
    """Toggle payload for the like endpoint."""

    like: StrictBool = Field(..., description="True to like, False to remove the like")
