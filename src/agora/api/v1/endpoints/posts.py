# src/agora/api/v1/endpoints/posts.py
"""Post endpoints for the Agora API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status
from pydantic import ValidationError

from agora.api.v1.dependencies import (
    CurrentUserDep,
    PostIdDep,
    SessionDep,
    parse_decimal,
    to_http_error,
)
from agora.core.permissions import Permission, has_permission
from agora.errors import AgoraError, MediaNotFoundError
from agora.schemas.post import LikeRequest, PostCreate, PostResponse
from agora.services import images, likes, post_service

router = APIRouter(prefix="/posts", tags=["posts"])
logger = logging.getLogger(__name__)


@router.post("", response_model=PostResponse, status_code=status.HTTP_200_OK)
async def create_post(
    current_user: CurrentUserDep,
    db: SessionDep,
    content: Annotated[str, Form()],
    parent: Annotated[str | None, Form()] = None,
    media: Annotated[list[UploadFile] | None, File()] = None,
) -> PostResponse:
    """Publish a post, optionally replying to ``parent`` and carrying images."""
    try:
        payload = PostCreate(content=content, parent_id=parent)
    except ValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.errors()[0]["msg"],
        ) from err

    try:
        blobs = [images.convert_post_image(await upload.read()) for upload in media or []]
        post = post_service.create_post(
            db,
            author_id=current_user.id,
            content=payload.content,
            parent_id=payload.parent_id,
            media=blobs,
        )
    except AgoraError as err:
        raise to_http_error(err) from err

    logger.debug("User %s published post %s", current_user.id, post.id)
    return PostResponse.model_validate(post)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: PostIdDep, db: SessionDep) -> PostResponse:
    """Get a specific post by ID."""
    try:
        post = post_service.get_post(db, post_id)
    except AgoraError as err:
        raise to_http_error(err) from err
    return PostResponse.model_validate(post)


@router.get(
    "/{post_id}/media/{index}",
    response_class=Response,
    responses={200: {"content": {"image/webp": {}}}},
)
async def get_post_media(post_id: PostIdDep, index: str, db: SessionDep) -> Response:
    """Return one attachment of a post as WebP."""
    number = parse_decimal(index)
    if number is None:
        raise to_http_error(MediaNotFoundError())
    try:
        data = post_service.get_media(db, post_id, number)
    except AgoraError as err:
        raise to_http_error(err) from err
    return Response(content=data, media_type="image/webp")


@router.patch("/{post_id}/like", status_code=status.HTTP_204_NO_CONTENT)
async def like_post(
    post_id: PostIdDep,
    payload: LikeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Like (``like: true``) or unlike (``like: false``) a post."""
    if payload.like:
        post = likes.add_like(db, post_id, current_user.id)
    else:
        post = likes.delete_like(db, post_id, current_user.id)

    if post is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post with given ID does not exist or the like is already in that state.",
        )


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: PostIdDep, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Delete a post; allowed for its author and for post moderators."""
    try:
        post = post_service.get_post(db, post_id)
    except AgoraError as err:
        raise to_http_error(err) from err

    if post.author_id != current_user.id and not has_permission(
        current_user.permissions, Permission.POSTS
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied.")

    post_service.delete_post(db, post)
