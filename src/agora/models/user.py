# src/agora/models/user.py
"""SQLAlchemy models for user accounts and their follow sets."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agora.db.session import Base


class User(Base):
    """Registered account.

    The ``followed`` and ``followers`` sets live in their own tables, one row
    per member, and each is mirrored by a stored counter on this row. A
    counter and its set are only ever changed together in one transaction.
    """

    __tablename__ = "user_account"
    __table_args__ = (
        CheckConstraint("followed_count >= 0", name="ck_user_followed_count"),
        CheckConstraint("followers_count >= 0", name="ck_user_followers_count"),
        # Never hand a deleted account's id to a new signup.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    # bcrypt hash; unset until the password step of signup completes.
    password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    avatar: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    permissions: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    followed_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    followers_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    followed_entries: Mapped[list[FollowedEntry]] = relationship(
        "FollowedEntry",
        cascade="all, delete-orphan",
        order_by="FollowedEntry.followed_id",
    )
    follower_entries: Mapped[list[FollowerEntry]] = relationship(
        "FollowerEntry",
        cascade="all, delete-orphan",
        order_by="FollowerEntry.follower_id",
    )

    @property
    def followed(self) -> list[int]:
        """Return identifiers of the users this user follows."""
        return [entry.followed_id for entry in self.followed_entries]

    @property
    def followers(self) -> list[int]:
        """Return identifiers of the users following this user."""
        return [entry.follower_id for entry in self.follower_entries]


class FollowedEntry(Base):
    """Member of a user's ``followed`` set."""

    __tablename__ = "user_followed"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Plain reference: entries may outlive the followed account.
    followed_id: Mapped[int] = mapped_column(Integer, primary_key=True)


class FollowerEntry(Base):
    """Member of a user's ``followers`` set."""

    __tablename__ = "user_follower"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    follower_id: Mapped[int] = mapped_column(Integer, primary_key=True)
