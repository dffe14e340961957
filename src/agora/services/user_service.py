"""CRUD-style helpers for managing users."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.errors import EmailTakenError, PasswordPolicyError, UserNotFoundError
from agora.models.post import Post
from agora.models.user import User
from agora.services import credentials, likes, relationships

__all__ = [
    "get_user",
    "get_user_by_email",
    "register_user",
    "update_profile",
    "set_avatar",
    "delete_user",
]

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    """Return a single user by primary key.

    Raises:
        UserNotFoundError: If the user does not exist.
    """
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user registered with ``email``, if any."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def register_user(db: Session, email: str, name: str, password: str) -> User:
    """Create an account and set its password.

    The account is inserted first and the password stored in a second step;
    a password the policy rejects removes the fresh account again.

    Raises:
        EmailTakenError: If the email is already registered.
        PasswordPolicyError: If the password breaks the password policy.
    """
    if get_user_by_email(db, email) is not None:
        raise EmailTakenError()

    user = User(email=email.strip().lower(), name=name.strip())
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise EmailTakenError() from err
    db.refresh(user)

    try:
        user = credentials.set_password(db, user.id, password)
    except PasswordPolicyError:
        delete_user(db, user.id)
        raise

    logger.info("Registered user %s", user.id)
    return user


def update_profile(db: Session, user_id: int, email: str, name: str) -> User:
    """Replace the email and display name of ``user_id``.

    Raises:
        UserNotFoundError: If the user does not exist.
        EmailTakenError: If another account already uses ``email``.
    """
    user = get_user(db, user_id)
    owner = get_user_by_email(db, email)
    if owner is not None and owner.id != user.id:
        raise EmailTakenError()

    user.email = email.strip().lower()
    user.name = name.strip()
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise EmailTakenError() from err
    db.refresh(user)
    return user


def set_avatar(db: Session, user_id: int, avatar: bytes | None) -> User:
    """Store (or clear, with ``None``) the avatar of ``user_id``."""
    user = get_user(db, user_id)
    user.avatar = avatar
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Remove a user together with its posts and every trace in other records.

    The user's follow edges and likes are withdrawn first, so the counters on
    the other side stay equal to their sets.

    Raises:
        UserNotFoundError: If the user does not exist.
    """
    get_user(db, user_id)
    relationships.detach_user(db, user_id)
    likes.remove_user_likes(db, user_id)

    user = get_user(db, user_id)
    for post in db.scalars(select(Post).where(Post.author_id == user_id)).all():
        db.delete(post)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
