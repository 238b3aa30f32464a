"""
Credential store — persistence for admin accounts.

Users are never hard-deleted: ``soft_delete`` clears ``is_active``, which
hides the account from login lookups but keeps it retrievable by id.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.models.user import User
from bulletin.schemas.user import UserUpdate

logger = logging.getLogger(__name__)

# Attributes a UserUpdate patch may touch, in column order
_PATCH_FIELDS: tuple[str, ...] = ("email", "name", "role", "is_active")


class UserStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    # ── Reads ───────────────────────────────────────────────────────
    async def get_by_id(self, user_id: str) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str, active_only: bool = True) -> User | None:
        """Case-insensitive lookup; login uses the active-only form."""
        query = select(User).where(func.lower(User.email) == email.strip().lower())
        if active_only:
            query = query.where(User.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        existing = await self.find_by_email(email, active_only=False)
        return existing is not None and existing.id != exclude_id

    async def list_active(self) -> list[User]:
        result = await self.db.execute(
            select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    # ── Writes ──────────────────────────────────────────────────────
    async def create(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: str = "admin",
        must_change_password: bool = True,
    ) -> User:
        now = datetime.now(timezone.utc)
        user = User(
            id=f"user-{uuid.uuid4()}",
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            role=role,
            must_change_password=must_change_password,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        await self._commit()
        logger.info("Created user %s (%s)", user.id, role)
        return user

    async def update(self, user_id: str, patch: UserUpdate) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None

        for field in _PATCH_FIELDS:
            value = getattr(patch, field)
            if value is not None:
                setattr(user, field, value.lower() if field == "email" else value)
        user.updated_at = datetime.now(timezone.utc)

        await self._commit()
        logger.info("Updated user %s", user_id)
        return user

    async def update_password(
        self,
        user_id: str,
        password_hash: str,
        must_change_password: bool = False,
    ) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.password_hash = password_hash
        user.must_change_password = must_change_password
        user.updated_at = datetime.now(timezone.utc)
        await self._commit()
        logger.info("Password updated for user %s", user_id)
        return user

    async def touch_last_login(self, user_id: str) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(last_login_at=datetime.now(timezone.utc))
        )
        await self._commit()

    async def soft_delete(self, user_id: str) -> bool:
        user = await self.get_by_id(user_id)
        if user is None:
            return False
        user.is_active = False
        user.updated_at = datetime.now(timezone.utc)
        await self._commit()
        logger.info("Deactivated user %s", user_id)
        return True
