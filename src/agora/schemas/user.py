"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _AccountFields(BaseModel):
    """Email and display name shared by signup and profile updates."""

    email: EmailStr = Field(..., description="Login email address")
    name: str = Field(..., min_length=3, max_length=64, description="Public display name")

    @field_validator("email", "name", mode="before")
    @classmethod
    def strip_whitespace(cls, v: object) -> object:
        """Trim surrounding whitespace before length checks."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Store emails lowercased so uniqueness is case-insensitive."""
        return v.lower()


class SignupRequest(_AccountFields):
    """Schema for account registration."""

    password: str = Field(
        ..., min_length=1, description="Plaintext password; policy checked server-side"
    )


class ProfileUpdateRequest(_AccountFields):
    """Schema for replacing a user's email and display name."""


class PasswordChangeRequest(BaseModel):
    """Schema for setting a new password."""

    password: str = Field(..., min_length=1, description="New plaintext password")


class UserPublic(BaseModel):
    """Publicly visible part of a user profile."""

    id: int
    name: str
    followed_count: int
    followers_count: int

    model_config = ConfigDict(from_attributes=True)
