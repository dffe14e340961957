"""Domain errors raised by the Agora service layer.

Every error carries the HTTP status code the route layer reports for it, so
endpoints can translate failures without knowing each subclass.
"""

from __future__ import annotations

from fastapi import status


class AgoraError(Exception):
    """Base class for expected business failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


# Validation -----------------------------------------------------------------


class ValidationFailure(AgoraError):
    """Input was malformed; no mutation was attempted."""


class PasswordPolicyError(ValidationFailure):
    default_message = "Password does not satisfy the password policy."


class InvalidImageError(ValidationFailure):
    default_message = "Uploaded file is not a supported image."


class InvalidParentError(ValidationFailure):
    default_message = "You can not answer to post which does not exist."


class MediaLimitError(ValidationFailure):
    default_message = "Too many media attachments."


class FollowLimitError(ValidationFailure):
    default_message = "User is following too many users."


# Not found ------------------------------------------------------------------


class NotFoundError(AgoraError):
    """A referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UserNotFoundError(NotFoundError):
    default_message = "User with the given ID does not exist."


class PostNotFoundError(NotFoundError):
    default_message = "Post with the given ID does not exist."


class MediaNotFoundError(NotFoundError):
    default_message = "Media with the given index does not exist."


# Conflicts ------------------------------------------------------------------


class ConflictError(AgoraError):
    """The requested state already holds (or no longer holds)."""


class EmailTakenError(ConflictError):
    default_message = "User with the specified email address already exists."


class AlreadyFollowingError(ConflictError):
    default_message = "You follow this user."


class NotFollowingError(ConflictError):
    default_message = "You do not follow this user."


class SelfFollowError(ConflictError):
    default_message = "You can not follow yourself."


# Integrity ------------------------------------------------------------------


class FollowCompensatedError(NotFoundError):
    """The acting user vanished mid-operation and the first write was reverted."""

    default_message = "User disappeared while the relationship was being updated."
