# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.
"""Unit tests for TenantRepository against an in-memory SQLite engine."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from bizscope.core.errors import TenantStoreError
from bizscope.storage.database import (
    close_db,
    create_all_tables,
    get_db,
    get_session_factory,
    override_engine_for_test,
)
from bizscope.storage.models import Business
from bizscope.storage.repositories import TenantRepository

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@asynccontextmanager
async def sqlite_session(create_tables: bool = True):
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    override_engine_for_test(engine)
    if create_tables:
        await create_all_tables()
    try:
        async with get_session_factory()() as session:
            yield session
    finally:
        await close_db()


async def _seed(session: AsyncSession) -> None:
    session.add_all([
        Business(id="b2", owner_id="u1", name="Bakery", attributes={}, created_at=T0 + timedelta(days=2)),
        Business(id="b1", owner_id="u1", name="Mill", attributes={"region": "north"}, created_at=T0),
        Business(id="b0", owner_id="u1", name="Cafe", attributes={}, created_at=T0 + timedelta(days=2)),
        Business(id="x1", owner_id="u2", name="Elsewhere", attributes={}, created_at=T0),
    ])
    await session.commit()


class TestTenantRepository:
    @pytest.mark.asyncio
    async def test_list_owned_in_creation_order(self):
        async with sqlite_session() as session:
            await _seed(session)
            tenants = await TenantRepository(session).list_owned_tenants("u1")

        assert [t.id for t in tenants] == ["b1", "b0", "b2"]
        assert tenants[0].name == "Mill"
        assert tenants[0].attributes == {"region": "north"}

    @pytest.mark.asyncio
    async def test_list_owned_empty(self):
        async with sqlite_session() as session:
            await _seed(session)
            assert await TenantRepository(session).list_owned_tenants("nobody") == []

    @pytest.mark.asyncio
    async def test_get_tenant(self):
        async with sqlite_session() as session:
            await _seed(session)
            repo = TenantRepository(session)
            tenant = await repo.get_tenant("u2", "x1")
            assert tenant.name == "Elsewhere"

    @pytest.mark.asyncio
    async def test_get_tenant_under_wrong_owner(self):
        async with sqlite_session() as session:
            await _seed(session)
            assert await TenantRepository(session).get_tenant("u1", "x1") is None
            assert await TenantRepository(session).get_tenant("u1", "missing") is None

    @pytest.mark.asyncio
    async def test_database_errors_become_store_errors(self):
        async with sqlite_session(create_tables=False) as session:
            repo = TenantRepository(session)
            with pytest.raises(TenantStoreError) as exc_info:
                await repo.list_owned_tenants("u1")
            assert exc_info.value.retryable is True
            with pytest.raises(TenantStoreError):
                await repo.get_tenant("u1", "b1")


class TestDatabaseDependency:
    @pytest.mark.asyncio
    async def test_get_db_reads_through_overridden_engine(self):
        async with sqlite_session() as session:
            await _seed(session)
            async for db in get_db():
                tenants = await TenantRepository(db).list_owned_tenants("u2")
            assert [t.id for t in tenants] == ["x1"]
