"""
Liveness probe.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.api.deps import get_db
from bulletin.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — the process is up; ``database`` reports connectivity."""
    result = HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())
    try:
        await db.execute(select(1))
        result.database = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result
