"""
Password hashing and signed access tokens.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from storefront.db import AdminUserRecord
from storefront.errors import AuthenticationFailed


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode(
        "utf-8"
    )


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def create_token(
    user: AdminUserRecord,
    *,
    secret: str,
    algorithm: str,
    expires_in: timedelta,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, *, secret: str, algorithm: str) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationFailed: if the token is expired, malformed or forged.
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationFailed("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationFailed("Invalid token") from exc
    if not isinstance(claims.get("id"), int):
        raise AuthenticationFailed("Invalid token")
    return claims
