"""
Auth module: JWT creation/validation and the get_current_user FastAPI dependency.

Every entity route depends on get_current_user. A request without a valid
bearer token, or whose token names a user that no longer exists, is rejected
with 401 before any record service runs.
"""

import time
from dataclasses import dataclass

import structlog
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Depends, Request
from jose import jwt, ExpiredSignatureError, JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcare_backend.config import get_settings
from healthcare_backend.database import get_db
from healthcare_backend.exceptions import Unauthenticated
from healthcare_backend.models.user import User

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"

_password_hasher = PasswordHasher()


@dataclass(frozen=True)
class UserPrincipal:
    """Resolved identity attached to each request."""
    id: int
    name: str
    email: str


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_token(user) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "exp": int(time.time()) + settings.jwt_expire_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> int:
    """Verify a JWT and return the user id it was issued for."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthenticated("Token expired", "Please log in again")
    except JWTError:
        raise Unauthenticated("Invalid token", "Please provide a valid authentication token")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthenticated("Invalid token", "Please provide a valid authentication token")


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header and
    resolves it to a live user.
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Access token required", "Please provide a valid authentication token")

    user_id = decode_token(token.strip())

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        logger.info("token_for_missing_user", user_id=user_id)
        raise Unauthenticated("Invalid token", "User no longer exists")

    return UserPrincipal(id=user.id, name=user.name, email=user.email)
