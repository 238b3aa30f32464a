"""
User management — super admin only.

Self-protection runs before the role check: nobody may change their own
role or deactivate their own account, whatever role they hold.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bulletin.api.deps import (
    ensure_not_self,
    ensure_super_admin,
    get_current_identity,
    get_user_store,
    require_super_admin,
)
from bulletin.core.exceptions import Conflict, NotFound
from bulletin.core.security import get_password_hash
from bulletin.models.user import User
from bulletin.schemas.common import MessageResponse
from bulletin.schemas.token import Identity
from bulletin.schemas.user import (
    PasswordReset,
    UserCreate,
    UserCreatedResponse,
    UserRead,
    UserUpdate,
)
from bulletin.stores.users import UserStore

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[UserRead])
async def list_users(
    users: UserStore = Depends(get_user_store),
    _admin: Identity = Depends(require_super_admin),
) -> list[User]:
    return await users.list_active()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    users: UserStore = Depends(get_user_store),
    _admin: Identity = Depends(require_super_admin),
) -> User:
    user = await users.get_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.post("", response_model=UserCreatedResponse, status_code=201)
async def create_user(
    body: UserCreate,
    users: UserStore = Depends(get_user_store),
    admin: Identity = Depends(require_super_admin),
) -> UserCreatedResponse:
    """Invite a new admin. They must change the password on first login."""
    if await users.email_taken(body.email):
        raise Conflict("A user with this email already exists")

    user = await users.create(
        email=body.email,
        password_hash=get_password_hash(body.password),
        name=body.name,
        role=body.role,
        must_change_password=True,
    )
    logger.info("User %s invited by %s", user.id, admin.id)
    return UserCreatedResponse(
        message=(
            "User created successfully. They will be asked to change "
            "their password on first login."
        ),
        user=UserRead.model_validate(user),
    )


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    users: UserStore = Depends(get_user_store),
    identity: Identity = Depends(get_current_identity),
) -> User:
    if body.touches_access:
        ensure_not_self(identity, user_id)
    ensure_super_admin(identity)

    if body.email and await users.email_taken(body.email, exclude_id=user_id):
        raise Conflict("This email is already in use")

    updated = await users.update(user_id, body)
    if updated is None:
        raise NotFound("User not found")
    return updated


@router.put("/{user_id}/reset-password", response_model=MessageResponse)
async def reset_password(
    user_id: str,
    body: PasswordReset,
    users: UserStore = Depends(get_user_store),
    _admin: Identity = Depends(require_super_admin),
) -> MessageResponse:
    """Set a new password and force a change on the user's next login."""
    updated = await users.update_password(
        user_id,
        get_password_hash(body.new_password),
        must_change_password=True,
    )
    if updated is None:
        raise NotFound("User not found")
    return MessageResponse(
        message="Password has been reset. The user will need to change it on their next login."
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def deactivate_user(
    user_id: str,
    users: UserStore = Depends(get_user_store),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Soft-delete (deactivate) an account. The row is kept."""
    ensure_not_self(identity, user_id)
    ensure_super_admin(identity)

    if not await users.soft_delete(user_id):
        raise NotFound("User not found")
    return MessageResponse(message="User deactivated successfully")
