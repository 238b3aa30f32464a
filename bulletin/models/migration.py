"""
Migration ledger — one row per applied schema migration, in apply order.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from bulletin.db.base import Base


class AppliedMigration(Base):
    __tablename__ = "migrations"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    name: str = Column(String(255), unique=True, nullable=False)  # type: ignore[assignment]
    executed_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
