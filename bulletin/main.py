"""
Bulletin — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `stores/`, `services/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from bulletin.api.endpoints.auth import limiter
from bulletin.api.router import api_router
from bulletin.core.config import settings
from bulletin.core.exceptions import register_exception_handlers
from bulletin.db.migrations import apply_migrations
from bulletin.db.seed import ensure_super_admin
from bulletin.db.session import Database

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database.from_settings(settings)
    app.state.database = database

    if settings.DB_AUTO_MIGRATE:
        await apply_migrations(database.engine)

    # Seed bootstrap super admin on first run
    async with database.session() as session:
        await ensure_super_admin(session, settings)

    logger.info("Bulletin v%s started", settings.VERSION)
    yield
    await database.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Announcements, events and posters for the organization site",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Login throttling
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    # Serve uploaded images read-only
    uploads_dir = settings.UPLOAD_ROOT / "uploads"
    uploads_dir.mkdir(parents=True, exist_ok=True)
    application.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")
    logger.info("Uploads served from %s", uploads_dir)

    return application


app = create_app()
