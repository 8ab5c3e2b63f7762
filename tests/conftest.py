"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings and flags are cached on first use; set the environment before any aisle import.
os.environ["ENV"] = "test"
os.environ["FF_USE_AUTH0"] = "false"
os.environ["FF_USE_REDIS"] = "false"
os.environ["FF_ENFORCE_AI_LIMIT"] = "true"
os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "aisle-test.db")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from aisle.core.auth import DEV_TENANT_ID
from aisle.core.database import Base, session_scope
from aisle.core.dependencies import get_db
from aisle.factory import create_app
from aisle.models import Conversation, Tenant, WeddingKernel  # noqa: F401  (registers tables)
from aisle.services.tenants import create_tenant


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tenant(db):
    """The dev tenant every unauthenticated test request runs as."""
    tenant = await create_tenant(db, slug=DEV_TENANT_ID, tenant_id=DEV_TENANT_ID)
    await db.commit()
    return tenant


@pytest_asyncio.fixture
async def client(session_factory):
    app = create_app()

    async def override_get_db():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
