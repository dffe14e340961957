"""Tests for the two-step follow/unfollow operations."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from agora.core.settings import settings
from agora.errors import (
    AlreadyFollowingError,
    FollowCompensatedError,
    FollowLimitError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from agora.models import User
from agora.services import relationships, user_service


def _counts(db_session, user_id):
    user = db_session.get(User, user_id, populate_existing=True)
    return user.followed_count, user.followers_count


def test_follow_updates_both_sides(db_session, test_user, other_user) -> None:
    follower = relationships.follow(db_session, test_user.id, other_user.id)

    assert follower.id == test_user.id
    assert follower.followed == [other_user.id]
    assert other_user.followers == [test_user.id]
    assert _counts(db_session, test_user.id) == (1, 0)
    assert _counts(db_session, other_user.id) == (0, 1)


def test_follow_twice_raises(db_session, test_user, other_user) -> None:
    relationships.follow(db_session, test_user.id, other_user.id)
    with pytest.raises(AlreadyFollowingError):
        relationships.follow(db_session, test_user.id, other_user.id)
    assert _counts(db_session, other_user.id) == (0, 1)


def test_follow_self_raises(db_session, test_user) -> None:
    with pytest.raises(SelfFollowError):
        relationships.follow(db_session, test_user.id, test_user.id)


def test_follow_unknown_target(db_session, test_user) -> None:
    with pytest.raises(UserNotFoundError):
        relationships.follow(db_session, test_user.id, 999)
    assert _counts(db_session, test_user.id) == (0, 0)


def test_follow_unknown_follower(db_session, other_user) -> None:
    with pytest.raises(UserNotFoundError):
        relationships.follow(db_session, 999, other_user.id)
    assert _counts(db_session, other_user.id) == (0, 0)


def test_follow_reverts_when_follower_vanishes(db_session, test_user, other_user) -> None:
    """The follower is deleted between the precondition and the second write."""
    follower_id, followed_id = test_user.id, other_user.id
    real_add_follower = relationships._add_follower

    def add_then_delete_follower(db, user_id, new_follower_id):
        applied = real_add_follower(db, user_id, new_follower_id)
        user_service.delete_user(db, new_follower_id)
        return applied

    with patch.object(relationships, "_add_follower", side_effect=add_then_delete_follower):
        with pytest.raises(FollowCompensatedError):
            relationships.follow(db_session, follower_id, followed_id)

    followed = db_session.get(User, followed_id, populate_existing=True)
    assert followed.followers_count == 0
    assert followed.followers == []


def test_follow_limit_reverts_first_step(
    db_session, make_user, test_user, other_user, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "max_followed", 1)
    third = make_user("Third User")

    relationships.follow(db_session, test_user.id, other_user.id)
    with pytest.raises(FollowLimitError):
        relationships.follow(db_session, test_user.id, third.id)

    assert _counts(db_session, test_user.id) == (1, 0)
    assert _counts(db_session, third.id) == (0, 0)
    assert third.followers == []


def test_follow_reverts_on_storage_error(db_session, test_user, other_user) -> None:
    with patch.object(relationships, "_add_followed", side_effect=SQLAlchemyError("boom")):
        with pytest.raises(SQLAlchemyError):
            relationships.follow(db_session, test_user.id, other_user.id)

    assert _counts(db_session, other_user.id) == (0, 0)
    assert _counts(db_session, test_user.id) == (0, 0)


def test_unfollow_updates_both_sides(db_session, test_user, other_user) -> None:
    relationships.follow(db_session, test_user.id, other_user.id)
    follower = relationships.unfollow(db_session, test_user.id, other_user.id)

    assert follower.followed == []
    assert other_user.followers == []
    assert _counts(db_session, test_user.id) == (0, 0)
    assert _counts(db_session, other_user.id) == (0, 0)


def test_unfollow_without_edge(db_session, test_user, other_user) -> None:
    with pytest.raises(NotFollowingError):
        relationships.unfollow(db_session, test_user.id, other_user.id)


def test_unfollow_deleted_target_cleans_follower_side(
    db_session, test_user, other_user
) -> None:
    follower_id, followed_id = test_user.id, other_user.id
    relationships.follow(db_session, follower_id, followed_id)
    # Drop the row alone so the follower still lists it.
    db_session.delete(db_session.get(User, followed_id))
    db_session.commit()

    follower = relationships.unfollow(db_session, follower_id, followed_id)
    assert follower.followed == []
    assert follower.followed_count == 0


def test_unfollow_restores_first_step_on_storage_error(
    db_session, test_user, other_user
) -> None:
    relationships.follow(db_session, test_user.id, other_user.id)

    with patch.object(relationships, "_remove_followed", side_effect=SQLAlchemyError("boom")):
        with pytest.raises(SQLAlchemyError):
            relationships.unfollow(db_session, test_user.id, other_user.id)

    assert _counts(db_session, other_user.id) == (0, 1)
    assert other_user.followers == [test_user.id]
    assert _counts(db_session, test_user.id) == (1, 0)


def test_counters_match_sets_after_mixed_operations(db_session, make_user) -> None:
    hub = make_user("Hub User")
    fans = [make_user(f"Fan {n}") for n in range(4)]

    for fan in fans:
        relationships.follow(db_session, fan.id, hub.id)
    relationships.unfollow(db_session, fans[1].id, hub.id)
    relationships.follow(db_session, hub.id, fans[0].id)

    db_session.refresh(hub)
    assert hub.followers_count == len(hub.followers) == 3
    assert hub.followed_count == len(hub.followed) == 1
    for fan in fans:
        db_session.refresh(fan)
        assert fan.followed_count == len(fan.followed)
        assert fan.followers_count == len(fan.followers)
