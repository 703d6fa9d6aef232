"""
Password hashing and JWT helpers.

Passwords are hashed with bcrypt through passlib. Access tokens are HS256
JWTs carrying the user id in `sub`; issuer, audience and expiry are checked
on decode. Raw passwords and tokens are never logged.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from tasky.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return password.strip()[:72]


def hash_password(password: str) -> str:
    return pwd_context.hash(normalize_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return pwd_context.verify(normalize_password(plain), hashed)


def create_access_token(user_id: UUID, email: str, settings: Optional[Settings] = None) -> str:
    """
    Issue a signed access token.

    Args:
        user_id: Id placed in the `sub` claim
        email: Address placed in the `email` claim
        settings: Signing configuration (defaults to the process settings)

    Returns:
        Encoded JWT string
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> UUID:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        ValueError: If the token is malformed, expired, or signed for another issuer/audience
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise ValueError("Invalid or expired token") from e

    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token missing user id")
    try:
        return UUID(subject)
    except ValueError as e:
        raise ValueError("Token subject is not a user id") from e
