"""
Pytest fixtures for the reality log backend tests.

Every test runs against a throwaway sqlite database (aiosqlite). The
database URL is set before ``realitylog`` is imported so the module-level
engine picks it up.

Run with: pytest -v
"""

import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="realitylog-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR / 'app.db'}"
os.environ.setdefault("DEV_MODE", "true")
os.environ.setdefault("FIREBASE_PROJECT_ID", "")

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from realitylog.models import Base  # noqa: E402
from realitylog.services.permissions import ADMIN, LOGGER, VIEWER, Identity  # noqa: E402


def make_identity(role: str, name: str | None = None) -> Identity:
    name = name or role
    return Identity(
        id=uuid.uuid4(),
        email=f"{name}@example.com",
        display_name=name.title(),
        role=role,
        created_at=datetime.now(timezone.utc),
        last_active_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def identity_factory():
    return make_identity


@pytest.fixture
def admin() -> Identity:
    return make_identity(ADMIN)


@pytest.fixture
def logger_identity() -> Identity:
    return make_identity(LOGGER)


@pytest.fixture
def viewer() -> Identity:
    return make_identity(VIEWER)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Session factory bound to a fresh sqlite file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()
