"""Pydantic schemas for User CRUD and self-service profile updates."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_ROLES = {"admin", "super_admin"}
MIN_PASSWORD_LENGTH = 6


def _normalise_email(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


def _check_role(v: str | None) -> str | None:
    if v is not None and v not in VALID_ROLES:
        raise ValueError(f"Role must be one of: {sorted(VALID_ROLES)}")
    return v


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return v


# ── Outbound projections (never carry the password hash) ────────────
class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str | None = None
    role: str
    must_change_password: bool = Field(serialization_alias="mustChangePassword")


class UserRead(UserProfile):
    is_active: bool = Field(serialization_alias="isActive")
    last_login_at: datetime | None = Field(default=None, serialization_alias="lastLoginAt")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")


class UserCreatedResponse(BaseModel):
    success: bool = True
    message: str
    user: UserRead


# ── Inbound bodies ──────────────────────────────────────────────────
class UserCreate(BaseModel):
    email: str
    password: str
    name: str | None = None
    role: str = "admin"

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)  # type: ignore[return-value]

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("role")
    @classmethod
    def _role(cls, v: str) -> str:
        return _check_role(v)  # type: ignore[return-value]


class UserUpdate(BaseModel):
    """Admin patch for another account; ``None`` keeps the stored value."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    name: str | None = None
    role: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return _normalise_email(v)

    @field_validator("role")
    @classmethod
    def _role(cls, v: str | None) -> str | None:
        return _check_role(v)

    @property
    def touches_access(self) -> bool:
        """True when the patch changes the target's role or deactivates it."""
        return self.role is not None or self.is_active is False


class ProfileUpdate(BaseModel):
    email: str | None = None
    name: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return _normalise_email(v)


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return _check_password(v)


class PasswordReset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return _check_password(v)
