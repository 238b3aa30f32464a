"""
Shared test fixtures for the Bulletin test suite.

Async throughout: aiosqlite in-memory database + httpx AsyncClient.
"""

import os
import sys
import tempfile
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"  # keep hashing fast in tests
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="bulletin-test-")

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from bulletin.api.deps import get_image_manager
from bulletin.core.config import settings
from bulletin.core.security import create_access_token, get_password_hash
from bulletin.db.base import Base
from bulletin.db.session import Database
from bulletin.main import app
from bulletin.models.user import User
from bulletin.schemas.token import Identity
from bulletin.services.images import ImageManager
from bulletin.stores.users import UserStore

# One shared in-memory database for the whole session
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
test_database = Database(test_engine)

# ASGITransport does not run the lifespan, so wire the handle directly
app.state.database = test_database


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def image_manager(tmp_path) -> ImageManager:
    """Every test gets its own upload root."""
    manager = ImageManager(tmp_path, settings.MAX_UPLOAD_BYTES)
    app.dependency_overrides[get_image_manager] = lambda: manager
    yield manager
    app.dependency_overrides.pop(get_image_manager, None)


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with test_database.session() as session:
        yield session


# ── Accounts & tokens ───────────────────────────────────────────────
PASSWORD = "password123"


async def make_user(
    session: AsyncSession,
    email: str,
    role: str = "admin",
    password: str = PASSWORD,
) -> User:
    return await UserStore(session).create(
        email=email,
        password_hash=get_password_hash(password),
        name=email.split("@")[0].title(),
        role=role,
        must_change_password=False,
    )


def bearer(user: User) -> dict[str, str]:
    token = create_access_token(Identity(id=user.id, email=user.email, role=user.role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "root@example.com", role="super_admin")


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "editor@example.com", role="admin")


@pytest.fixture
def super_headers(super_admin: User) -> dict[str, str]:
    return bearer(super_admin)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return bearer(admin)
