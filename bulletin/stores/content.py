"""
Content store — CRUD for announcements, events and posters.

Each kind gets the same operation set over its own table. Updates are
coalescing: a ``None`` in the patch keeps the stored value. Deletes are
physical.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.models.content import Announcement, Event, Poster

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", Announcement, Event, Poster)


class ContentStore(Generic[ModelT]):
    """Shared CRUD; subclasses name the model, id prefix and field lists."""

    model: ClassVar[type]
    kind: ClassVar[str]
    create_fields: ClassVar[tuple[str, ...]]
    patch_fields: ClassVar[tuple[str, ...]]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def ordering(self) -> tuple[Any, ...]:
        raise NotImplementedError

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _fetch(self, *criteria: Any, limit: int | None = None) -> list[ModelT]:
        query = select(self.model).where(*criteria).order_by(*self.ordering())
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # ── Reads ───────────────────────────────────────────────────────
    async def list_all(self) -> list[ModelT]:
        """Every record, active or not."""
        return await self._fetch()

    async def list_active(self) -> list[ModelT]:
        return await self._fetch(self.model.is_active.is_(True))

    async def get_by_id(self, item_id: str) -> ModelT | None:
        """Direct lookup; ``is_active`` does not hide a record here."""
        result = await self.db.execute(select(self.model).where(self.model.id == item_id))
        return result.scalar_one_or_none()

    # ── Writes ──────────────────────────────────────────────────────
    async def create(self, fields: BaseModel) -> ModelT:
        now = datetime.now(timezone.utc)
        values = {name: getattr(fields, name) for name in self.create_fields}
        item = self.model(
            id=f"{self.kind}-{uuid.uuid4()}",
            is_active=True,
            created_at=now,
            updated_at=now,
            **values,
        )
        self.db.add(item)
        await self._commit()
        logger.info("Created %s %s", self.kind, item.id)
        return item

    async def update(self, item_id: str, patch: BaseModel) -> ModelT | None:
        item = await self.get_by_id(item_id)
        if item is None:
            return None

        for name in self.patch_fields:
            value = getattr(patch, name)
            if value is not None:
                setattr(item, name, value)
        item.updated_at = datetime.now(timezone.utc)

        await self._commit()
        logger.info("Updated %s %s", self.kind, item_id)
        return item

    async def delete(self, item_id: str) -> bool:
        item = await self.get_by_id(item_id)
        if item is None:
            return False
        await self.db.delete(item)
        await self._commit()
        logger.info("Deleted %s %s", self.kind, item_id)
        return True


class AnnouncementStore(ContentStore[Announcement]):
    model = Announcement
    kind = "announcement"
    create_fields = ("title", "date", "description", "icon", "badge", "badge_variant")
    patch_fields = create_fields + ("is_active",)

    def ordering(self) -> tuple[Any, ...]:
        return (Announcement.date.desc(), Announcement.created_at.desc())


class EventStore(ContentStore[Event]):
    model = Event
    kind = "event"
    create_fields = ("title", "date", "time", "description", "image_url")
    patch_fields = create_fields + ("is_active",)

    def ordering(self) -> tuple[Any, ...]:
        return (Event.date.asc(), Event.created_at.asc())

    async def list_upcoming(self, limit: int = 4, today: date | None = None) -> list[Event]:
        """Active events dated today or later, soonest first."""
        today = today or datetime.now(timezone.utc).date()
        return await self._fetch(Event.is_active.is_(True), Event.date >= today, limit=limit)


class PosterStore(ContentStore[Poster]):
    model = Poster
    kind = "poster"
    create_fields = ("title", "category", "image_url", "description", "display_order")
    patch_fields = create_fields + ("is_active",)

    def ordering(self) -> tuple[Any, ...]:
        return (Poster.display_order.asc(), Poster.created_at.desc())

    async def list_by_category(self, category: str) -> list[Poster]:
        return await self._fetch(Poster.is_active.is_(True), Poster.category == category)

    async def latest_by_category(self, category: str) -> Poster | None:
        """Most recently created active poster in *category*."""
        result = await self.db.execute(
            select(Poster)
            .where(Poster.is_active.is_(True), Poster.category == category)
            .order_by(Poster.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
