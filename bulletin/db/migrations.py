"""
Schema migrations with an applied-migrations ledger.

Each migration has a stable name and the tables it creates. Applied names
are recorded in the ``migrations`` table in apply order, so running
``apply_migrations`` again only executes what is still pending.

Usage:
  python -m bulletin.db.migrations up
  python -m bulletin.db.migrations down
  python -m bulletin.db.migrations status
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Connection, Table, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine

from bulletin.models.content import Announcement, Event, Poster
from bulletin.models.migration import AppliedMigration
from bulletin.models.user import User

logger = logging.getLogger(__name__)

_ledger: Table = AppliedMigration.__table__  # type: ignore[assignment]


@dataclass(frozen=True)
class Migration:
    name: str
    tables: tuple[Table, ...]

    def upgrade(self, conn: Connection) -> None:
        for table in self.tables:
            table.create(conn, checkfirst=True)

    def downgrade(self, conn: Connection) -> None:
        for table in reversed(self.tables):
            table.drop(conn, checkfirst=True)


MIGRATIONS: tuple[Migration, ...] = (
    Migration("001_create_posters_table", (Poster.__table__,)),  # type: ignore[arg-type]
    Migration("002_create_announcements_table", (Announcement.__table__,)),  # type: ignore[arg-type]
    Migration("003_create_events_table", (Event.__table__,)),  # type: ignore[arg-type]
    Migration("004_create_users_table", (User.__table__,)),  # type: ignore[arg-type]
)


def _ensure_ledger(conn: Connection) -> None:
    _ledger.create(conn, checkfirst=True)


async def applied_migrations(engine: AsyncEngine) -> list[str]:
    """Names of applied migrations, oldest first."""
    async with engine.begin() as conn:
        await conn.run_sync(_ensure_ledger)
        result = await conn.execute(select(_ledger.c.name).order_by(_ledger.c.id))
        return [row[0] for row in result]


async def apply_migrations(engine: AsyncEngine) -> list[str]:
    """Run every pending migration, each in its own transaction."""
    done = set(await applied_migrations(engine))
    pending = [m for m in MIGRATIONS if m.name not in done]
    if not pending:
        logger.info("All migrations are up to date")
        return []

    logger.info("Found %d pending migration(s)", len(pending))
    executed: list[str] = []
    for migration in pending:
        async with engine.begin() as conn:
            await conn.run_sync(migration.upgrade)
            await conn.execute(
                insert(_ledger).values(
                    name=migration.name,
                    executed_at=datetime.now(timezone.utc),
                )
            )
        logger.info("Migration %s completed", migration.name)
        executed.append(migration.name)
    return executed


async def rollback_last(engine: AsyncEngine) -> str | None:
    """Undo the most recently applied migration; ``None`` when there is none."""
    done = await applied_migrations(engine)
    if not done:
        logger.info("No migrations to roll back")
        return None

    name = done[-1]
    by_name = {m.name: m for m in MIGRATIONS}
    async with engine.begin() as conn:
        migration = by_name.get(name)
        if migration is not None:
            await conn.run_sync(migration.downgrade)
        else:
            logger.warning("Ledger entry %s has no known migration; removing entry only", name)
        await conn.execute(delete(_ledger).where(_ledger.c.name == name))
    logger.info("Rolled back %s", name)
    return name


async def migration_status(engine: AsyncEngine) -> list[tuple[str, bool]]:
    done = set(await applied_migrations(engine))
    return [(m.name, m.name in done) for m in MIGRATIONS]


# ── CLI ─────────────────────────────────────────────────────────────
async def _run(command: str) -> None:
    from bulletin.core.config import settings
    from bulletin.db.session import Database

    database = Database.from_settings(settings)
    try:
        if command == "up":
            await apply_migrations(database.engine)
        elif command == "down":
            await rollback_last(database.engine)
        else:
            status = await migration_status(database.engine)
            for name, applied in status:
                print(f"  {'✓' if applied else '○'} {name}")
            print(f"\n{sum(a for _, a in status)}/{len(status)} migrations executed")
    finally:
        await database.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Manage the bulletin database schema.")
    parser.add_argument("command", choices=["up", "down", "status"])
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s | %(message)s")
    asyncio.run(_run(args.command))


if __name__ == "__main__":
    main()
