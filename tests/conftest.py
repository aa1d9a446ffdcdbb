# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Shared test fixtures for all BizScope tests.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Dict, List, Optional, Tuple

import pytest
import fakeredis.aioredis

from bizscope.core.context import init_platform_context
from bizscope.core.identity import ManagerIdentity, OwnerIdentity
from bizscope.core.metrics import resolver_metrics
from bizscope.kernel.redis_client import inject_redis_for_test
from bizscope.kernel.resolver import BusinessContextResolver
from bizscope.memory.session_store import SessionStore
from bizscope.protocols.schema import Tenant


# ── Mock Tenant Store ────────────────────────────────────────


class MockTenantStore:
    """
    In-memory TenantStore.

    `gates` holds an asyncio.Event per owner id; calls for that owner block
    until the event is set, which lets tests control completion order.
    """

    def __init__(self):
        self.owned: Dict[str, List[Tenant]] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: List[Tuple[str, ...]] = []

    def add(self, owner_id: str, *tenants: Tenant) -> None:
        self.owned.setdefault(owner_id, []).extend(tenants)

    def replace(self, owner_id: str, tenant: Tenant) -> None:
        self.owned[owner_id] = [
            tenant if t.id == tenant.id else t for t in self.owned.get(owner_id, [])
        ]

    async def _wait(self, owner_id: str) -> None:
        gate = self.gates.get(owner_id)
        if gate is not None:
            await gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def list_owned_tenants(self, owner_id: str) -> List[Tenant]:
        self.calls.append(("list", owner_id))
        await self._wait(owner_id)
        return list(self.owned.get(owner_id, []))

    async def get_tenant(self, owner_id: str, tenant_id: str) -> Optional[Tenant]:
        self.calls.append(("get", owner_id, tenant_id))
        await self._wait(owner_id)
        return next((t for t in self.owned.get(owner_id, []) if t.id == tenant_id), None)


# ── Fixtures ─────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_metrics():
    resolver_metrics.reset()
    yield
    resolver_metrics.reset()


@pytest.fixture
def mock_redis():
    """Provide a FakeRedis async instance and initialize PlatformContext."""
    r = fakeredis.aioredis.FakeRedis(decode_responses=True)
    inject_redis_for_test(r)
    init_platform_context(r)
    return r


@pytest.fixture
def browser_session_id() -> str:
    return f"bs_{uuid.uuid4().hex[:8]}"


@pytest.fixture
def session_store(mock_redis, browser_session_id) -> SessionStore:
    return SessionStore(mock_redis, browser_session_id)


@pytest.fixture
def tenant_store() -> MockTenantStore:
    return MockTenantStore()


@pytest.fixture
def resolver(tenant_store, session_store) -> BusinessContextResolver:
    return BusinessContextResolver(tenant_store, session_store)


@pytest.fixture
def make_tenant():
    def _make(tenant_id: str, name: Optional[str] = None, **attributes) -> Tenant:
        return Tenant(id=tenant_id, name=name or f"Business {tenant_id}", attributes=attributes)

    return _make


@pytest.fixture
def owner() -> OwnerIdentity:
    return OwnerIdentity(id="u1", display_name="Olivia Owner")


@pytest.fixture
def manager() -> ManagerIdentity:
    return ManagerIdentity(
        id="m1",
        owner_id="o1",
        tenant_id="t1",
        permissions=frozenset({"view_inventory"}),
        display_name="Max Manager",
    )
