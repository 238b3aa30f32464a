"""Pydantic schemas for login and JWT identities."""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from bulletin.schemas.user import UserProfile


class Identity(BaseModel):
    """Who the bearer of a valid token is, as of the moment it was issued."""

    id: str
    email: str
    role: str

    @property
    def is_super_admin(self) -> bool:
        return self.role == "super_admin"


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Email is required")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginResponse(BaseModel):
    success: bool = True
    user: UserProfile
    token: str


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserProfile
    token: str
