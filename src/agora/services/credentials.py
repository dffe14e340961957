"""Password storage and session token issuance."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from agora.core import security
from agora.errors import PasswordPolicyError, UserNotFoundError
from agora.models.user import User
from agora.services.password_policy import validate_password

__all__ = [
    "set_password",
    "compare_password",
    "issue_token",
    "decode_token",
    "authenticate",
]

logger = logging.getLogger(__name__)


def set_password(db: Session, user_id: int, plaintext: str) -> User:
    """Validate, hash and store a new password for ``user_id``.

    The policy check runs before anything is written, so a rejected password
    leaves the stored hash untouched.

    Raises:
        PasswordPolicyError: With the message of the first broken rule.
        UserNotFoundError: If no user has the given id.
    """
    violations = validate_password(plaintext)
    if violations:
        raise PasswordPolicyError(violations[0].message)

    try:
        hashed = security.hash_password(plaintext)
    except ValueError as err:
        raise PasswordPolicyError(str(err)) from err

    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    user.password = hashed
    db.commit()
    db.refresh(user)
    return user


def compare_password(stored_hash: str | None, plaintext: str) -> bool:
    """Return True if ``plaintext`` matches ``stored_hash``."""
    return security.verify_password(stored_hash, plaintext)


def issue_token(user: User) -> str:
    """Create a signed session token describing ``user``."""
    return security.encode_token(
        {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "permissions": int(user.permissions or 0),
        }
    )


def decode_token(token: str) -> dict[str, Any]:
    """Return the verified claims of a session token."""
    return security.decode_token(token)


def authenticate(db: Session, email: str, plaintext: str) -> User | None:
    """Return the user owning ``email`` if ``plaintext`` is their password."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not compare_password(user.password, plaintext):
        logger.info("Rejected login attempt")
        return None
    return user
