# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Platform Context — holds the shared infrastructure references.

Initialized at startup, injected into API routes via FastAPI Depends.
Resolvers are never shared: each consumer gets its own from
`build_business_context()`.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis

from bizscope.kernel.business_context import BusinessContext
from bizscope.kernel.notifier import Notifier
from bizscope.kernel.resolver import BusinessContextResolver
from bizscope.memory.session_store import SessionStore
from bizscope.storage.repositories import TenantStore


class PlatformContext:
    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis

    def get_session_store(self, browser_session_id: str) -> SessionStore:
        """Create a SessionStore bound to one browsing session."""
        return SessionStore(self.redis, browser_session_id)

    def build_business_context(
        self,
        tenant_store: TenantStore,
        browser_session_id: str,
        notifier: Optional[Notifier] = None,
    ) -> BusinessContext:
        resolver = BusinessContextResolver(
            tenant_store,
            self.get_session_store(browser_session_id),
            notifier=notifier,
        )
        return BusinessContext(resolver)


# ── Global singleton ────────────────────────────────────────

_ctx: Optional[PlatformContext] = None


def init_platform_context(redis: aioredis.Redis) -> PlatformContext:
    global _ctx
    _ctx = PlatformContext(redis)
    return _ctx


def get_platform_context() -> PlatformContext:
    if _ctx is None:
        raise RuntimeError("PlatformContext not initialized. Call init_platform_context() first.")
    return _ctx
