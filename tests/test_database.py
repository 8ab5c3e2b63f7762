"""Tests for engine URL handling and the per-request unit of work."""

import pytest

from aisle.core.database import async_url, session_scope
from aisle.models import Tenant
from aisle.services.tenants import create_tenant


class TestAsyncUrl:
    def test_postgres_urls_use_asyncpg(self) -> None:
        assert async_url("postgres://u:p@db/aisle") == "postgresql+asyncpg://u:p@db/aisle"
        assert async_url("postgresql://u:p@db/aisle") == "postgresql+asyncpg://u:p@db/aisle"

    def test_explicit_driver_untouched(self) -> None:
        assert async_url("postgresql+asyncpg://u:p@db/aisle") == "postgresql+asyncpg://u:p@db/aisle"
        assert async_url("sqlite+aiosqlite:///aisle.db") == "sqlite+aiosqlite:///aisle.db"


class TestSessionScope:
    @pytest.mark.asyncio
    async def test_clean_exit_commits(self, session_factory) -> None:
        async with session_scope(session_factory) as session:
            await create_tenant(session, slug="emma-and-james", tenant_id="t-commit")

        async with session_factory() as session:
            assert await session.get(Tenant, "t-commit") is not None

    @pytest.mark.asyncio
    async def test_error_rolls_back_everything(self, session_factory) -> None:
        with pytest.raises(RuntimeError):
            async with session_scope(session_factory) as session:
                await create_tenant(session, slug="emma-and-james", tenant_id="t-rollback")
                raise RuntimeError("LLM unavailable")

        async with session_factory() as session:
            assert await session.get(Tenant, "t-rollback") is None
