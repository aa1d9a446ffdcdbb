# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Session Store — best-effort persistence of the last-active business.

One browsing session owns one record, stored under a fixed key:
  bizscope:{browser_session_id}:session:{SESSION_RECORD_KEY}

Every write is a single SET with TTL that replaces any previous value.
Redis being unreachable or disabled never surfaces: failures are logged,
counted, and reads report "no record".
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from bizscope.core.config import settings
from bizscope.core.metrics import resolver_metrics
from bizscope.kernel.namespace import get_key, get_session_pattern
from bizscope.protocols.schema import SessionRecord

logger = logging.getLogger("bizscope.session_store")

_STORE_ERRORS = (RedisError, OSError)


class SessionStore:
    """Typed get/set/clear of the SessionRecord for one browsing session."""

    def __init__(
        self,
        redis: aioredis.Redis,
        browser_session_id: str,
        record_key: Optional[str] = None,
        ttl: Optional[int] = None,
    ) -> None:
        if not browser_session_id:
            raise ValueError("browser_session_id must not be empty")
        self._redis = redis
        self._browser_session_id = browser_session_id
        self._key = get_key(
            browser_session_id, "session", record_key or settings.SESSION_RECORD_KEY
        )
        self._ttl = ttl or settings.SESSION_TTL

    @property
    def key(self) -> str:
        return self._key

    def _degraded(self, op: str, exc: BaseException) -> None:
        resolver_metrics.inc("session_store_error")
        logger.warning(
            "Session store %s failed, continuing without persistence: %s",
            op, exc,
            extra={"browser_session_id": self._browser_session_id},
        )

    async def get(self) -> Optional[SessionRecord]:
        """
        Read the stored record.

        A corrupt record is removed and reported as absent.
        """
        try:
            raw = await self._redis.get(self._key)
        except _STORE_ERRORS as e:
            self._degraded("read", e)
            return None
        if raw is None:
            return None
        try:
            return SessionRecord.from_json(raw)
        except ValidationError:
            logger.error("Discarding unreadable session record at %s", self._key)
            await self.clear()
            return None

    async def set(self, record: SessionRecord) -> None:
        try:
            await self._redis.set(self._key, record.to_json(), ex=self._ttl)
        except _STORE_ERRORS as e:
            self._degraded("write", e)

    async def clear(self) -> None:
        try:
            await self._redis.delete(self._key)
        except _STORE_ERRORS as e:
            self._degraded("clear", e)

    async def clear_all(self) -> int:
        """
        Drop every session-scoped key of this browsing session.

        Used on a fresh app start. Returns the number of keys removed.
        """
        removed = 0
        try:
            async for key in self._redis.scan_iter(match=get_session_pattern(self._browser_session_id)):
                removed += await self._redis.delete(key)
        except _STORE_ERRORS as e:
            self._degraded("clear_all", e)
        return removed
