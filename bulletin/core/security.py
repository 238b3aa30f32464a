"""
JWT token creation / verification and password hashing (bcrypt).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from bulletin.core.config import settings
from bulletin.schemas.token import Identity

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str | None) -> bool:
    """Check *plain* against a stored hash. Malformed hashes verify as False."""
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    identity: Identity,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token carrying the identity's id, email and role."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    return jwt.encode(
        {
            "sub": identity.id,
            "email": identity.email,
            "role": identity.role,
            "type": "access",
            "iat": now,
            "exp": expire,
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_access_token(token: str) -> Identity | None:
    """Return the embedded identity if the token is valid, else ``None``."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    user_id, email, role = payload.get("sub"), payload.get("email"), payload.get("role")
    if not user_id or not email or not role:
        return None
    return Identity(id=user_id, email=email, role=role)
