"""
Async SQLAlchemy engine & session factory (asyncpg driver).

The ``Database`` handle is built once at startup, stored on ``app.state``
and disposed at shutdown; nothing here is created at import time.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bulletin.core.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the connection pool and hands out sessions bound to it."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine_args: dict[str, Any] = {
            "echo": False,
            "pool_pre_ping": True,
        }
        if "postgresql" in settings.DATABASE_URL:
            # Bounded pool: a request that cannot get a connection within
            # DB_POOL_TIMEOUT fails instead of queueing forever.
            engine_args.update(
                {
                    "pool_size": settings.DB_POOL_SIZE,
                    "max_overflow": 0,
                    "pool_timeout": settings.DB_POOL_TIMEOUT,
                    "pool_recycle": 300,
                }
            )
        logger.info("Creating database engine (pool size %d)", settings.DB_POOL_SIZE)
        return cls(create_async_engine(settings.DATABASE_URL, **engine_args))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")
