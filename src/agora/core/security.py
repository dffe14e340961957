"""Password hashing and token signing primitives."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import jwt

from agora.core.settings import settings

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def hash_password(plaintext: str, rounds: int | None = None) -> str:
    """Hash ``plaintext`` with a freshly generated bcrypt salt.

    Raises:
        ValueError: If the encoded password exceeds bcrypt's input limit.
    """
    encoded = plaintext.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValueError("Password is too long to be hashed")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(encoded, salt).decode("ascii")


def verify_password(stored_hash: str | None, plaintext: str) -> bool:
    """Check ``plaintext`` against a stored bcrypt hash.

    Returns:
        True if the password matches; False for a mismatch, a missing hash or
        input bcrypt refuses to process.
    """
    if not stored_hash:
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), stored_hash.encode("ascii"))
    except ValueError:
        return False


def encode_token(claims: dict[str, Any]) -> str:
    """Sign ``claims`` with the configured key and algorithm.

    An ``exp`` claim is added only when an access token lifetime is configured.
    """
    to_encode: dict[str, Any] = dict(claims)
    if settings.access_token_expire_minutes:
        to_encode["exp"] = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes,
        )
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_token(token: str) -> dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        jose.JWTError: If the signature is invalid or the token expired.
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload
