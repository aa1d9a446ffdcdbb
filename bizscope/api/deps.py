# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.

The upstream identity provider authenticates the caller and forwards the
resulting identity as headers:

  X-Session-Id          browsing session (required)
  X-User-Id             identity id; absent means signed out
  X-User-Role           owner | manager
  X-Owner-Id            manager only: owning identity
  X-Business-Id         manager only: assigned business
  X-User-Permissions    manager only: comma-separated permission names
  X-Display-Name        optional
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from bizscope.api.errors import MissingSessionError, UnsupportedRoleAPIError
from bizscope.core.context import get_platform_context
from bizscope.core.errors import UnsupportedRoleError
from bizscope.core.identity import Identity, identity_from_profile
from bizscope.kernel.business_context import BusinessContext
from bizscope.kernel.notifier import CollectingNotifier
from bizscope.storage.database import get_db
from bizscope.storage.repositories import TenantRepository, TenantStore


class ResolvedRequest(NamedTuple):
    context: BusinessContext
    notifier: CollectingNotifier

    @property
    def notifications(self) -> List[dict]:
        return self.notifier.messages


async def get_browser_session_id(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
) -> str:
    if not x_session_id:
        raise MissingSessionError()
    return x_session_id


async def get_current_identity(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_owner_id: Optional[str] = Header(None, alias="X-Owner-Id"),
    x_business_id: Optional[str] = Header(None, alias="X-Business-Id"),
    x_user_permissions: Optional[str] = Header(None, alias="X-User-Permissions"),
    x_display_name: Optional[str] = Header(None, alias="X-Display-Name"),
) -> Optional[Identity]:
    """Build the caller's identity from headers; None when signed out."""
    if not x_user_id:
        return None
    profile = {
        "uid": x_user_id,
        "ownerId": x_owner_id,
        "businessId": x_business_id,
        "permissions": x_user_permissions,
        "displayName": x_display_name or "",
    }
    try:
        return identity_from_profile(profile, x_user_role)
    except UnsupportedRoleError as e:
        raise UnsupportedRoleAPIError(e.role)


async def get_tenant_store(db: AsyncSession = Depends(get_db)) -> TenantStore:
    return TenantRepository(db)


async def get_resolved_context(
    identity: Optional[Identity] = Depends(get_current_identity),
    browser_session_id: str = Depends(get_browser_session_id),
    tenant_store: TenantStore = Depends(get_tenant_store),
) -> ResolvedRequest:
    """Resolve the business context for this request's identity."""
    notifier = CollectingNotifier()
    context = get_platform_context().build_business_context(
        tenant_store, browser_session_id, notifier=notifier
    )
    await context.set_identity(identity)
    return ResolvedRequest(context, notifier)
