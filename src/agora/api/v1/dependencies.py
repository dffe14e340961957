"""Shared API dependencies for authentication and common functionality."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from agora.core.permissions import Permission, has_permission
from agora.db.session import MAX_ID, get_db
from agora.errors import AgoraError
from agora.models import User
from agora.services.credentials import decode_token

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication; a missing header is reported as 401 below.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

# Longer digit runs cannot fit an INTEGER column anyway.
_MAX_DIGITS = len(str(MAX_ID))


def parse_decimal(raw: str) -> int | None:
    """Return ``raw`` as a non-negative int, or None unless it is a short ASCII digit run."""
    if not (raw.isascii() and raw.isdecimal()) or len(raw) > _MAX_DIGITS:
        return None
    return int(raw)


def _parse_id(raw: str) -> int:
    """Convert a path identifier to an integer primary key.

    Raises:
        HTTPException: 404 when ``raw`` cannot be an identifier.
    """
    value = parse_decimal(raw)
    if value is None or not 0 < value <= MAX_ID:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid ID.")
    return value


def user_id_path(user_id: str) -> int:
    """Validate the ``{user_id}`` path segment."""
    return _parse_id(user_id)


def post_id_path(post_id: str) -> int:
    """Validate the ``{post_id}`` path segment."""
    return _parse_id(post_id)


UserIdDep = Annotated[int, Depends(user_id_path)]
PostIdDep = Annotated[int, Depends(post_id_path)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is missing or invalid, or the user no longer exists
    """
    if credentials is None:
        raise _unauthorized("Access denied. No token provided.")
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as err:
        logger.info("Rejected invalid bearer token")
        raise _unauthorized("Could not validate credentials") from err

    subject = payload.get("sub")
    user_id = parse_decimal(subject) if isinstance(subject, str) else None
    if user_id is None:
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def ensure_self(current_user: User, target_id: int) -> None:
    """Allow only the addressed user.

    Raises:
        HTTPException: 401 when the caller is someone else.
    """
    if current_user.id != target_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied.")


def ensure_self_or(current_user: User, target_id: int, permission: Permission) -> None:
    """Allow the addressed user or holders of ``permission``.

    Raises:
        HTTPException: 401 when neither applies.
    """
    if current_user.id != target_id and not has_permission(current_user.permissions, permission):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied.")


def to_http_error(err: AgoraError) -> HTTPException:
    """Translate a service-layer failure to the matching HTTP error."""
    return HTTPException(status_code=err.status_code, detail=str(err))
