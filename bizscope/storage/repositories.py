# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Repository Layer — read-only access to business records.

The resolver depends on the TenantStore protocol only; TenantRepository is
the SQLAlchemy implementation over the `businesses` table.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizscope.core.errors import TenantStoreError
from bizscope.protocols.schema import Tenant
from bizscope.storage.models import Business


class TenantStore(Protocol):
    async def list_owned_tenants(self, owner_id: str) -> List[Tenant]:
        ...

    async def get_tenant(self, owner_id: str, tenant_id: str) -> Optional[Tenant]:
        ...


# ── Tenant Repository ───────────────────────────────────────

class TenantRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_owned_tenants(self, owner_id: str) -> List[Tenant]:
        """List every business owned by `owner_id`, oldest first."""
        try:
            result = await self.db.execute(
                select(Business)
                .where(Business.owner_id == owner_id)
                .order_by(Business.created_at.asc(), Business.id.asc())
            )
        except SQLAlchemyError as e:
            raise TenantStoreError(f"Failed to load businesses: {e}") from e
        return [row.to_tenant() for row in result.scalars().all()]

    async def get_tenant(self, owner_id: str, tenant_id: str) -> Optional[Tenant]:
        """Fetch one business; None when it does not exist under this owner."""
        try:
            result = await self.db.execute(
                select(Business).where(
                    Business.owner_id == owner_id,
                    Business.id == tenant_id,
                )
            )
        except SQLAlchemyError as e:
            raise TenantStoreError(f"Failed to load business {tenant_id}: {e}") from e
        row = result.scalar_one_or_none()
        return row.to_tenant() if row is not None else None
