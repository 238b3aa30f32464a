"""
Auth endpoints — login, logout and self-service profile / password.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from bulletin.api.deps import get_current_identity, get_user_store
from bulletin.core.config import settings
from bulletin.core.exceptions import Conflict, InvalidCredentials, NotFound
from bulletin.core.security import create_access_token, get_password_hash, verify_password
from bulletin.models.user import User
from bulletin.schemas.common import MessageResponse
from bulletin.schemas.token import Identity, LoginRequest, LoginResponse, ProfileResponse
from bulletin.schemas.user import PasswordChange, ProfileUpdate, UserProfile, UserUpdate
from bulletin.stores.users import UserStore

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _identity_of(user: User) -> Identity:
    return Identity(id=user.id, email=user.email, role=user.role)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    users: UserStore = Depends(get_user_store),
) -> LoginResponse:
    """Exchange email + password for a 24h bearer token."""
    user = await users.find_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", body.email)
        raise InvalidCredentials()

    await users.touch_last_login(user.id)
    token = create_access_token(_identity_of(user))
    logger.info("User %s logged in", user.id)
    return LoginResponse(user=UserProfile.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(_identity: Identity = Depends(get_current_identity)) -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserProfile)
async def read_current_user(
    identity: Identity = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> User:
    """Return profile of the currently authenticated user."""
    user = await users.get_by_id(identity.id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> ProfileResponse:
    """Change own email / name. Returns a fresh token carrying the new email."""
    if body.email and await users.email_taken(body.email, exclude_id=identity.id):
        raise Conflict("This email is already in use")

    # Only email and name are self-editable
    updated = await users.update(identity.id, UserUpdate(email=body.email, name=body.name))
    if updated is None:
        raise NotFound("User not found")

    return ProfileResponse(
        user=UserProfile.model_validate(updated),
        token=create_access_token(_identity_of(updated)),
    )


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    identity: Identity = Depends(get_current_identity),
    users: UserStore = Depends(get_user_store),
) -> MessageResponse:
    user = await users.get_by_id(identity.id)
    if user is None or not user.is_active:
        raise NotFound("User not found")

    if not verify_password(body.current_password, user.password_hash):
        raise InvalidCredentials("Current password is incorrect")

    await users.update_password(user.id, get_password_hash(body.new_password))
    return MessageResponse(message="Password changed successfully")
