"""
FastAPI dependencies — auth guards, database session, stores.

Request flow for protected routes:
  no / non-Bearer Authorization header  -> AuthRequired (401)
  token invalid, tampered or expired    -> SessionExpired (401)
  valid token, role too low             -> Forbidden (403)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.core.config import settings
from bulletin.core.exceptions import AuthRequired, Forbidden, SelfActionForbidden, SessionExpired
from bulletin.core.security import decode_access_token
from bulletin.schemas.token import Identity
from bulletin.services.images import ImageManager
from bulletin.stores.content import AnnouncementStore, EventStore, PosterStore
from bulletin.stores.users import UserStore

# auto_error=False so a missing header becomes AuthRequired, not FastAPI's 401
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False,
)


# ── Database session ────────────────────────────────────────────────
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        yield session


# ── Stores ──────────────────────────────────────────────────────────
def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_announcement_store(db: AsyncSession = Depends(get_db)) -> AnnouncementStore:
    return AnnouncementStore(db)


def get_event_store(db: AsyncSession = Depends(get_db)) -> EventStore:
    return EventStore(db)


def get_poster_store(db: AsyncSession = Depends(get_db)) -> PosterStore:
    return PosterStore(db)


def get_image_manager() -> ImageManager:
    return ImageManager(settings.UPLOAD_ROOT, settings.MAX_UPLOAD_BYTES)


# ── Auth dependencies ───────────────────────────────────────────────
def authenticate(token: str | None) -> Identity:
    """Identity for a bearer token; raises when it is missing or invalid."""
    if not token:
        raise AuthRequired()
    identity = decode_access_token(token)
    if identity is None:
        raise SessionExpired()
    return identity


async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Identity:
    return authenticate(token)


def ensure_super_admin(identity: Identity) -> None:
    if not identity.is_super_admin:
        raise Forbidden("Super admin privileges required")


def ensure_not_self(identity: Identity, target_id: str) -> None:
    """Nobody may change their own role or deactivate their own account."""
    if identity.id == target_id:
        raise SelfActionForbidden()


async def require_super_admin(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Only allow super_admin role to proceed."""
    ensure_super_admin(identity)
    return identity
