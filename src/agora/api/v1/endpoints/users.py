# src/agora/api/v1/endpoints/users.py
"""User account, profile and follow endpoints."""

from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status

from agora.api.v1.dependencies import (
    CurrentUserDep,
    SessionDep,
    UserIdDep,
    ensure_self,
    ensure_self_or,
    parse_decimal,
    to_http_error,
)
from agora.core.permissions import Permission
from agora.errors import AgoraError
from agora.schemas.auth import TokenResponse
from agora.schemas.post import PostSummary
from agora.schemas.user import (
    PasswordChangeRequest,
    ProfileUpdateRequest,
    SignupRequest,
    UserPublic,
)
from agora.services import credentials, images, post_service, relationships, user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    summary="Create an account",
    status_code=status.HTTP_200_OK,
    response_model=TokenResponse,
)
async def signup(payload: SignupRequest, db: SessionDep) -> TokenResponse:
    """Register a new account and return a session token for it."""
    try:
        user = user_service.register_user(db, payload.email, payload.name, payload.password)
    except AgoraError as err:
        raise to_http_error(err) from err
    return TokenResponse(access_token=credentials.issue_token(user))


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(user_id: UserIdDep, db: SessionDep) -> UserPublic:
    """Return the public profile of a user."""
    try:
        user = user_service.get_user(db, user_id)
    except AgoraError as err:
        raise to_http_error(err) from err
    return UserPublic.model_validate(user)


@router.get("/{user_id}/posts", response_model=list[PostSummary])
async def list_user_posts(
    user_id: UserIdDep,
    db: SessionDep,
    page: str | None = None,
) -> list[PostSummary]:
    """Return one page of a user's posts.

    ``page`` is a zero-based page number and is required.
    """
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You should choose page.")
    number = parse_decimal(page)
    if number is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Page has to be equal or larger than 0.",
        )

    posts = post_service.list_user_posts(db, user_id, number)
    if not posts:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Posts' page is empty.")
    return [PostSummary.model_validate(post) for post in posts]


@router.patch("/{user_id}", response_model=None)
async def update_user(
    user_id: UserIdDep,
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> TokenResponse | Response:
    """Replace a user's email and display name.

    Callers editing themselves receive a token with the updated claims.
    """
    ensure_self_or(current_user, user_id, Permission.USERS)
    try:
        user = user_service.update_profile(db, user_id, payload.email, payload.name)
    except AgoraError as err:
        raise to_http_error(err) from err

    if current_user.id == user_id:
        return TokenResponse(access_token=credentials.issue_token(user))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    user_id: UserIdDep,
    payload: PasswordChangeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Set a new password for the calling user."""
    ensure_self(current_user, user_id)
    try:
        credentials.set_password(db, user_id, payload.password)
    except AgoraError as err:
        raise to_http_error(err) from err


@router.get(
    "/{user_id}/avatar",
    response_class=Response,
    responses={200: {"content": {"image/webp": {}}}, 204: {"description": "No avatar set"}},
)
async def get_avatar(user_id: UserIdDep, db: SessionDep) -> Response:
    """Return the user's avatar as WebP."""
    try:
        user = user_service.get_user(db, user_id)
    except AgoraError as err:
        raise to_http_error(err) from err
    if user.avatar is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(content=user.avatar, media_type="image/webp")


@router.patch("/{user_id}/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def upload_avatar(
    user_id: UserIdDep,
    current_user: CurrentUserDep,
    db: SessionDep,
    avatar: UploadFile | None = File(None),
) -> None:
    """Replace the calling user's avatar with an uploaded image."""
    ensure_self(current_user, user_id)
    if avatar is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")

    data = await avatar.read()
    try:
        user_service.set_avatar(db, user_id, images.convert_avatar(data))
    except AgoraError as err:
        raise to_http_error(err) from err


@router.delete("/{user_id}/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def delete_avatar(user_id: UserIdDep, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Remove a user's avatar."""
    ensure_self_or(current_user, user_id, Permission.USERS)
    try:
        user_service.set_avatar(db, user_id, None)
    except AgoraError as err:
        raise to_http_error(err) from err


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UserIdDep, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Delete an account."""
    ensure_self_or(current_user, user_id, Permission.USERS)
    try:
        user_service.delete_user(db, user_id)
    except AgoraError as err:
        raise to_http_error(err) from err


@router.patch("/{user_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def follow_user(user_id: UserIdDep, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Make the calling user follow ``user_id``."""
    try:
        relationships.follow(db, current_user.id, user_id)
    except AgoraError as err:
        raise to_http_error(err) from err


@router.patch("/{user_id}/unfollow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(user_id: UserIdDep, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Make the calling user stop following ``user_id``."""
    try:
        relationships.unfollow(db, current_user.id, user_id)
    except AgoraError as err:
        raise to_http_error(err) from err
