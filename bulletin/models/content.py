"""
Content models — announcements, events and posters.

All three are hard-deleted; ``is_active`` only hides a record from the
public listings.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Index, Integer, String, Text

from bulletin.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Announcement(Base):
    __tablename__ = "announcements"
    __table_args__ = (Index("ix_announcements_date", "date"),)

    id: str = Column(String(50), primary_key=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    icon: str = Column(String(50), nullable=False, default="Bell")  # type: ignore[assignment]
    badge: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    badge_variant: str = Column(  # type: ignore[assignment]
        Enum("default", "secondary", "outline", name="badge_variant", native_enum=False),
        nullable=False,
        default="default",
    )
    is_active: bool = Column(Boolean, nullable=False, default=True, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (Index("ix_events_date", "date"),)

    id: str = Column(String(50), primary_key=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    time: str = Column(String(50), nullable=False)  # type: ignore[assignment]  # free text, e.g. "6-9PM"
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    image_url: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]


class Poster(Base):
    __tablename__ = "posters"
    __table_args__ = (
        Index("ix_posters_category", "category"),
        Index("ix_posters_created_at", "created_at"),
    )

    id: str = Column(String(50), primary_key=True)  # type: ignore[assignment]
    title: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    category: str = Column(  # type: ignore[assignment]
        Enum("service", "event", "theme", name="poster_category", native_enum=False),
        nullable=False,
    )
    image_url: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    display_order: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
