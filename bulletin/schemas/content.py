"""Pydantic schemas for announcements, events and posters.

Wire names are camelCase; every field that differs from its column name
carries an explicit alias so the mapping stays total.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

BadgeVariant = Literal["default", "secondary", "outline"]
PosterCategory = Literal["service", "event", "theme"]

POSTER_CATEGORIES: tuple[str, ...] = ("service", "event", "theme")
EVENT_IMAGE_DIRS: tuple[str, ...] = ("events",)
POSTER_IMAGE_DIRS: tuple[str, ...] = ("posters", "services", "theme")

_FILENAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,199}$")


def _required_text(v: str | None, label: str) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{label} is required")
    return v


def _uploaded_image(v: str | None, dirs: tuple[str, ...]) -> str | None:
    """Accept only ``/uploads/<dir>/<file>`` paths in one of *dirs*."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Image is required")
    parts = v.split("/")
    if (
        len(parts) != 4
        or parts[0] != ""
        or parts[1] != "uploads"
        or parts[2] not in dirs
        or not _FILENAME_RE.match(parts[3])
        or ".." in parts[3]
    ):
        allowed = ", ".join(f"/uploads/{d}/" for d in dirs)
        raise ValueError(f"Image must be an uploaded file under {allowed}")
    return v


class _Read(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    is_active: bool = Field(serialization_alias="isActive")
    created_at: dt.datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: dt.datetime | None = Field(default=None, serialization_alias="updatedAt")


class _Write(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Announcements ───────────────────────────────────────────────────
class AnnouncementRead(_Read):
    date: dt.date
    description: str
    icon: str
    badge: str
    badge_variant: str = Field(serialization_alias="badgeVariant")


class AnnouncementCreate(_Write):
    title: str
    date: dt.date
    description: str
    icon: str = "Bell"
    badge: str
    badge_variant: BadgeVariant = Field(default="default", alias="badgeVariant")

    @field_validator("title", "description", "icon", "badge")
    @classmethod
    def _text(cls, v: str, info) -> str:
        return _required_text(v, info.field_name.capitalize())  # type: ignore[return-value]


class AnnouncementUpdate(_Write):
    title: str | None = None
    date: dt.date | None = None
    description: str | None = None
    icon: str | None = None
    badge: str | None = None
    badge_variant: BadgeVariant | None = Field(default=None, alias="badgeVariant")
    is_active: bool | None = Field(default=None, alias="isActive")

    @field_validator("title", "description", "icon", "badge")
    @classmethod
    def _text(cls, v: str | None, info) -> str | None:
        return _required_text(v, info.field_name.capitalize())


# ── Events ──────────────────────────────────────────────────────────
class EventRead(_Read):
    date: dt.date
    time: str
    description: str
    image_url: str = Field(serialization_alias="imageUrl")


class EventCreate(_Write):
    title: str
    date: dt.date
    time: str
    description: str
    image_url: str = Field(alias="imageUrl")

    @field_validator("title", "time", "description")
    @classmethod
    def _text(cls, v: str, info) -> str:
        return _required_text(v, info.field_name.capitalize())  # type: ignore[return-value]

    @field_validator("image_url")
    @classmethod
    def _image(cls, v: str) -> str:
        return _uploaded_image(v, EVENT_IMAGE_DIRS)  # type: ignore[return-value]


class EventUpdate(_Write):
    title: str | None = None
    date: dt.date | None = None
    time: str | None = None
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    is_active: bool | None = Field(default=None, alias="isActive")

    @field_validator("title", "time", "description")
    @classmethod
    def _text(cls, v: str | None, info) -> str | None:
        return _required_text(v, info.field_name.capitalize())

    @field_validator("image_url")
    @classmethod
    def _image(cls, v: str | None) -> str | None:
        return _uploaded_image(v, EVENT_IMAGE_DIRS)


# ── Posters ─────────────────────────────────────────────────────────
class PosterRead(_Read):
    category: str
    image_url: str = Field(serialization_alias="imageUrl")
    description: str | None = None
    display_order: int = Field(serialization_alias="displayOrder")


class PosterCreate(_Write):
    title: str
    category: PosterCategory
    image_url: str = Field(alias="imageUrl")
    description: str | None = None
    display_order: int = Field(default=0, alias="displayOrder")

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _required_text(v, "Title")  # type: ignore[return-value]

    @field_validator("image_url")
    @classmethod
    def _image(cls, v: str) -> str:
        return _uploaded_image(v, POSTER_IMAGE_DIRS)  # type: ignore[return-value]


class PosterUpdate(_Write):
    title: str | None = None
    category: PosterCategory | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    description: str | None = None
    display_order: int | None = Field(default=None, alias="displayOrder")
    is_active: bool | None = Field(default=None, alias="isActive")

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return _required_text(v, "Title")

    @field_validator("image_url")
    @classmethod
    def _image(cls, v: str | None) -> str | None:
        return _uploaded_image(v, POSTER_IMAGE_DIRS)
