"""System and transparency endpoints for the Agora API."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from agora.api.v1.dependencies import SessionDep
from agora.core.settings import settings
from agora.models import Post, User

router = APIRouter(prefix="/system", tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
        },
        "limits": {
            "max_followed": settings.max_followed,
            "posts_page_size": settings.posts_page_size,
            "max_post_media": settings.max_post_media,
            "password_min_length": settings.password_min_length,
            "password_max_length": settings.password_max_length,
        },
        "images": {
            "avatar_size": settings.avatar_size,
            "post_image_max_width": settings.post_image_max_width,
            "post_image_max_height": settings.post_image_max_height,
        },
    }


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check that also verifies database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.error("Database health check failed", exc_info=True)
        db_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {"database": db_status},
        "version": settings.app_version,
    }


@router.get("/activity-stats")
async def get_activity_stats(db: SessionDep) -> dict[str, int]:
    """Network-wide activity counters."""
    users = db.scalar(select(func.count()).select_from(User)) or 0
    posts = db.scalar(select(func.count()).select_from(Post)) or 0
    return {"users": int(users), "posts": int(posts)}
