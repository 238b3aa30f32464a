"""
Seed data — bootstrap super admin and sample content.

``seed_sample_content`` and ``clear_content`` each run in a single
transaction: either every row lands (or goes) or none do.

Usage:
  python -m bulletin.db.seed            # super admin + sample content
  python -m bulletin.db.seed --clear    # remove all content first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.core.config import Settings
from bulletin.core.security import get_password_hash
from bulletin.models.content import Announcement, Event, Poster
from bulletin.models.user import User

logger = logging.getLogger(__name__)


def _sample_rows(today: date) -> list[Announcement | Event | Poster]:
    now = datetime.now(timezone.utc)

    def stamp(kind: str) -> dict:
        return {"id": f"{kind}-{uuid.uuid4()}", "created_at": now, "updated_at": now, "is_active": True}

    return [
        Poster(
            title="Sunday Service",
            category="service",
            image_url="/assets/posters/sunday-service.jpg",
            description="Join us every Sunday for worship and the Word",
            display_order=0,
            **stamp("poster"),
        ),
        Poster(
            title="Midweek Service",
            category="service",
            image_url="/assets/posters/midweek-service.jpg",
            description="Midweek service - Wednesdays",
            display_order=1,
            **stamp("poster"),
        ),
        Poster(
            title=f"Theme of the Month - {today:%B %Y}",
            category="theme",
            image_url="/assets/posters/theme-of-month.jpg",
            description="Walking in Restoration",
            display_order=0,
            **stamp("poster"),
        ),
        Announcement(
            title="Sunday Service Time Change",
            date=today,
            description="Sunday services now begin at 8:00 AM and 10:30 AM.",
            icon="Clock",
            badge="Important",
            badge_variant="default",
            **stamp("announcement"),
        ),
        Announcement(
            title="Bible Study Registration",
            date=today,
            description="Registration for the new study group is open at the information desk.",
            icon="BookOpen",
            badge="New",
            badge_variant="secondary",
            **stamp("announcement"),
        ),
        Event(
            title="Carol Service",
            date=today + timedelta(days=14),
            time="6:00 PM - 9:00 PM",
            description="An evening of carols and celebration.",
            image_url="/assets/events/carol-service.jpg",
            **stamp("event"),
        ),
        Event(
            title="Youth Retreat",
            date=today + timedelta(days=30),
            time="9:00 AM - 4:00 PM",
            description="A day of fellowship for the youth.",
            image_url="/assets/events/youth-retreat.jpg",
            **stamp("event"),
        ),
    ]


async def ensure_super_admin(session: AsyncSession, settings: Settings) -> User | None:
    """Create the bootstrap super admin if no account uses its email yet."""
    email = settings.FIRST_SUPER_ADMIN_EMAIL.strip().lower()
    async with session.begin():
        result = await session.execute(select(User).where(func.lower(User.email) == email))
        if result.scalar_one_or_none() is not None:
            return None

        now = datetime.now(timezone.utc)
        admin = User(
            id=f"user-{uuid.uuid4()}",
            email=email,
            password_hash=get_password_hash(settings.FIRST_SUPER_ADMIN_PASSWORD),
            name=settings.FIRST_SUPER_ADMIN_NAME,
            role="super_admin",
            must_change_password=False,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        session.add(admin)
    logger.info("Default super admin created: %s (password: <redacted>)", email)
    return admin


async def seed_sample_content(session: AsyncSession, today: date | None = None) -> int:
    rows = _sample_rows(today or date.today())
    async with session.begin():
        session.add_all(rows)
    logger.info("Seeded %d sample content rows", len(rows))
    return len(rows)


async def clear_content(session: AsyncSession) -> None:
    """Remove every announcement, event and poster. Users are kept."""
    async with session.begin():
        for model in (Announcement, Event, Poster):
            await session.execute(delete(model))
    logger.info("Cleared all content")


# ── CLI ─────────────────────────────────────────────────────────────
async def _run(clear: bool) -> None:
    from bulletin.core.config import settings
    from bulletin.db.migrations import apply_migrations
    from bulletin.db.session import Database

    database = Database.from_settings(settings)
    try:
        await apply_migrations(database.engine)
        async with database.session() as session:
            if clear:
                await clear_content(session)
        async with database.session() as session:
            await ensure_super_admin(session, settings)
        async with database.session() as session:
            await seed_sample_content(session)
    finally:
        await database.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the bulletin database.")
    parser.add_argument("--clear", action="store_true", help="delete existing content first")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s | %(message)s")
    asyncio.run(_run(args.clear))


if __name__ == "__main__":
    main()
