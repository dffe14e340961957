"""Permission bits stored on user accounts."""

from __future__ import annotations

from enum import IntFlag


class Permission(IntFlag):
    """Bitmask of elevated rights.

    Regular accounts carry ``NONE``; rights over one's own records never
    require a bit.
    """

    NONE = 0
    USERS = 1  # edit profiles and avatars of other users, delete accounts
    POSTS = 2  # delete posts authored by other users


def has_permission(granted: int | None, required: Permission) -> bool:
    """Return True when ``granted`` contains every bit of ``required``."""
    return (Permission(granted or 0) & required) == required
