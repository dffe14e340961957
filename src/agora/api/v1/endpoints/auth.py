# src/agora/api/v1/endpoints/auth.py
"""Authentication endpoints for the Agora API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from agora.api.v1.dependencies import SessionDep
from agora.schemas.auth import LoginRequest, TokenResponse
from agora.services import credentials

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "",
    summary="Exchange email and password for a session token",
    status_code=status.HTTP_200_OK,
    response_model=TokenResponse,
)
async def login(payload: LoginRequest, db: SessionDep) -> TokenResponse:
    """Authenticate with email and password."""
    user = credentials.authenticate(db, payload.email, payload.password)
    if user is None:
        # Unknown email and wrong password are indistinguishable to the caller.
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email or password.",
        )
    return TokenResponse(access_token=credentials.issue_token(user))
