"""Follow/unfollow as a two-step write with compensation.

A follow edge is stored twice: in the follower's ``followed`` set and in the
followed user's ``followers`` set. The two records are written in separate
transactions, each a single conditional update (see
:func:`agora.db.atomic.conditional_update`). When the second write cannot be
applied the first one is reverted, so callers never observe a one-sided edge.

Both operations use the same order:

* step A touches the *followed* user's ``followers`` set;
* step B touches the *follower's* ``followed`` set and is guarded by the
  precondition that started the operation.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agora.core.settings import settings
from agora.db.atomic import conditional_update
from agora.errors import (
    AlreadyFollowingError,
    FollowCompensatedError,
    FollowLimitError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from agora.models.user import FollowedEntry, FollowerEntry, User

__all__ = ["follow", "unfollow", "detach_user"]

logger = logging.getLogger(__name__)


def _followed_entry(user_id: int, followed_id: int):
    return select(FollowedEntry).where(
        FollowedEntry.user_id == user_id,
        FollowedEntry.followed_id == followed_id,
    )


def _follower_entry(user_id: int, follower_id: int):
    return select(FollowerEntry).where(
        FollowerEntry.user_id == user_id,
        FollowerEntry.follower_id == follower_id,
    )


def _user_exists(db: Session, user_id: int) -> bool:
    return db.scalar(select(User.id).where(User.id == user_id)) is not None


# Followers set (step A) -------------------------------------------------------


def _add_follower(db: Session, user_id: int, follower_id: int) -> bool:
    """Add ``follower_id`` to the followers of ``user_id``.

    Returns:
        True if the set changed, False if it already held the member.

    Raises:
        UserNotFoundError: If ``user_id`` does not exist.
    """
    stmt = (
        update(User)
        .where(User.id == user_id, ~_follower_entry(user_id, follower_id).exists())
        .values(followers_count=User.followers_count + 1)
    )
    if conditional_update(
        db,
        stmt,
        lambda: db.add(FollowerEntry(user_id=user_id, follower_id=follower_id)),
    ):
        return True
    if not _user_exists(db, user_id):
        raise UserNotFoundError()
    return False


def _remove_follower(db: Session, user_id: int, follower_id: int) -> bool:
    """Remove ``follower_id`` from the followers of ``user_id``.

    Returns:
        True if the set changed; False if the user or the member is absent.
    """
    stmt = (
        update(User)
        .where(User.id == user_id, _follower_entry(user_id, follower_id).exists())
        .values(followers_count=User.followers_count - 1)
    )
    return conditional_update(
        db,
        stmt,
        lambda: db.execute(
            delete(FollowerEntry).where(
                FollowerEntry.user_id == user_id,
                FollowerEntry.follower_id == follower_id,
            )
        ),
    )


# Followed set (step B) --------------------------------------------------------


def _add_followed(db: Session, user_id: int, followed_id: int, limit: int) -> bool:
    stmt = (
        update(User)
        .where(
            User.id == user_id,
            ~_followed_entry(user_id, followed_id).exists(),
            User.followed_count < limit,
        )
        .values(followed_count=User.followed_count + 1)
    )
    return conditional_update(
        db,
        stmt,
        lambda: db.add(FollowedEntry(user_id=user_id, followed_id=followed_id)),
    )


def _remove_followed(db: Session, user_id: int, followed_id: int) -> bool:
    stmt = (
        update(User)
        .where(User.id == user_id, _followed_entry(user_id, followed_id).exists())
        .values(followed_count=User.followed_count - 1)
    )
    return conditional_update(
        db,
        stmt,
        lambda: db.execute(
            delete(FollowedEntry).where(
                FollowedEntry.user_id == user_id,
                FollowedEntry.followed_id == followed_id,
            )
        ),
    )


def _restore_follower(db: Session, user_id: int, follower_id: int) -> bool:
    try:
        return _add_follower(db, user_id, follower_id)
    except UserNotFoundError:
        return False


def _compensate(
    db: Session,
    action: str,
    revert: Callable[..., bool],
    *args: int,
) -> None:
    """Run the reverse of step A, logging loudly if even that fails."""
    logger.warning("Reverting first step of %s for users %s", action, args)
    try:
        revert(db, *args)
    except SQLAlchemyError:
        logger.error("Compensation of %s failed for users %s", action, args, exc_info=True)
        raise


# Public operations -------------------------------------------------------------


def follow(db: Session, follower_id: int, followed_id: int) -> User:
    """Make ``follower_id`` follow ``followed_id``.

    Returns:
        The updated follower.

    Raises:
        SelfFollowError: If both identifiers are equal.
        UserNotFoundError: If either user does not exist.
        AlreadyFollowingError: If the edge already exists.
        FollowLimitError: If the follower reached the followed-set cap; the
            followed user's side has been reverted.
        FollowCompensatedError: If the follower disappeared after the
            precondition check; the followed user's side has been reverted.
    """
    if follower_id == followed_id:
        raise SelfFollowError()

    follower = db.scalars(
        select(User).where(
            User.id == follower_id,
            ~_followed_entry(follower_id, followed_id).exists(),
        )
    ).first()
    if follower is None:
        if not _user_exists(db, follower_id):
            raise UserNotFoundError()
        raise AlreadyFollowingError()

    step_a_applied = _add_follower(db, followed_id, follower_id)

    try:
        step_b_applied = _add_followed(db, follower_id, followed_id, settings.max_followed)
    except SQLAlchemyError:
        if step_a_applied:
            _compensate(db, "follow", _remove_follower, followed_id, follower_id)
        raise

    if not step_b_applied:
        if not _user_exists(db, follower_id):
            failure: Exception = FollowCompensatedError()
        elif db.scalar(_followed_entry(follower_id, followed_id).exists().select()):
            # A concurrent call completed the same edge; both halves are in place.
            raise AlreadyFollowingError()
        else:
            failure = FollowLimitError()
        if step_a_applied:
            _compensate(db, "follow", _remove_follower, followed_id, follower_id)
        raise failure

    logger.debug("User %s now follows user %s", follower_id, followed_id)
    follower = db.get(User, follower_id)
    if follower is None:  # pragma: no cover - deleted right after step B
        raise FollowCompensatedError()
    return follower


def unfollow(db: Session, follower_id: int, followed_id: int) -> User:
    """Remove the edge ``follower_id`` → ``followed_id``.

    A followed user that no longer exists has no followers set to update, so
    the follower's side is still cleaned up. If the follower disappears after
    the precondition check its own side went with it and step A already
    removed the other one, so nothing is reverted.

    Returns:
        The updated follower.

    Raises:
        UserNotFoundError: If the follower does not exist.
        NotFollowingError: If the edge does not exist.
        SQLAlchemyError: If step B failed in storage; the followed user's side
            has been restored before re-raising.
    """
    follower = db.scalars(
        select(User).where(
            User.id == follower_id,
            _followed_entry(follower_id, followed_id).exists(),
        )
    ).first()
    if follower is None:
        if not _user_exists(db, follower_id):
            raise UserNotFoundError()
        raise NotFollowingError()

    step_a_applied = _remove_follower(db, followed_id, follower_id)

    try:
        step_b_applied = _remove_followed(db, follower_id, followed_id)
    except SQLAlchemyError:
        if step_a_applied:
            _compensate(db, "unfollow", _restore_follower, followed_id, follower_id)
        raise

    if not step_b_applied:
        if not _user_exists(db, follower_id):
            raise UserNotFoundError()
        # A concurrent call removed the same edge first.
        raise NotFollowingError()

    logger.debug("User %s no longer follows user %s", follower_id, followed_id)
    follower = db.get(User, follower_id)
    if follower is None:  # pragma: no cover - deleted right after step B
        raise UserNotFoundError()
    return follower


def detach_user(db: Session, user_id: int) -> None:
    """Drop ``user_id`` from every other user's follow sets before it is deleted.

    Each removal is the matching single-record step of the saga, so the other
    side's counter moves with its set. The account's own sets go with its row.
    """
    followed_ids = db.scalars(
        select(FollowedEntry.followed_id).where(FollowedEntry.user_id == user_id)
    ).all()
    for followed_id in followed_ids:
        _remove_follower(db, followed_id, user_id)

    follower_ids = db.scalars(
        select(FollowerEntry.follower_id).where(FollowerEntry.user_id == user_id)
    ).all()
    for follower_id in follower_ids:
        _remove_followed(db, follower_id, user_id)

    logger.debug(
        "Detached user %s from %d followed and %d followers",
        user_id,
        len(followed_ids),
        len(follower_ids),
    )
