# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Context Bridge — republishes the business context in the legacy shape.

Older consumers read currentBusiness / userBusinesses / selectBusiness and
friends. The bridge maps a BusinessContext onto that shape without touching
it. When no context is wired in, or reading it fails, consumers get the
UnavailableBusinessContext values: nothing selected, not loading, every
permission granted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Mapping, Optional, Protocol, Tuple

from bizscope.core.identity import Identity, Role
from bizscope.protocols.schema import Tenant

logger = logging.getLogger("bizscope.bridge")

CONTEXT_UNAVAILABLE = "Context not available"


class BusinessContextSource(Protocol):
    """What the bridge reads. BusinessContext satisfies it."""

    tenants: Tuple[Tenant, ...]
    current: Optional[Tenant]
    loading: bool
    error: Optional[str]
    role: Optional[Role]
    identity: Optional[Identity]
    database_paths: Optional[Dict[str, str]]
    is_owner: bool
    is_manager: bool
    can_select_multiple: bool

    def has_permission(self, permission: str) -> bool: ...

    def get_user_permissions(self) -> FrozenSet[str]: ...

    async def select(self, tenant: Tenant) -> Any: ...

    async def clear_selection(self) -> Any: ...

    async def refresh(self) -> Any: ...


class UnavailableBusinessContext:
    """Permit-all stand-in used when no real context is reachable."""

    tenants: Tuple[Tenant, ...] = ()
    current: Optional[Tenant] = None
    loading = False
    error: Optional[str] = CONTEXT_UNAVAILABLE
    role: Optional[Role] = Role.MANAGER
    identity: Optional[Identity] = None
    database_paths: Optional[Dict[str, str]] = None
    is_owner = False
    is_manager = True
    can_select_multiple = False

    def has_permission(self, permission: str) -> bool:
        return True

    def get_user_permissions(self) -> FrozenSet[str]:
        return frozenset({"view_dashboard"})

    async def select(self, tenant: Tenant) -> None:
        return None

    async def clear_selection(self) -> None:
        return None

    async def refresh(self) -> None:
        return None


UNAVAILABLE_CONTEXT = UnavailableBusinessContext()


@dataclass(frozen=True)
class LegacyBusinessView:
    current_business: Optional[Tenant]
    user_businesses: Tuple[Tenant, ...]
    loading: bool
    error: Optional[str]
    user_role: Optional[str]
    current_user: Optional[Identity]
    database_paths: Optional[Mapping[str, str]]
    is_owner: bool
    is_manager: bool
    can_select_business: bool
    has_permission: Callable[[str], bool]
    get_user_permissions: Callable[[], FrozenSet[str]]
    select_business: Callable[[Tenant], Awaitable[Any]]
    clear_business_selection: Callable[[], Awaitable[Any]]
    refresh_business_data: Callable[[], Awaitable[Any]]
    connected: bool = True

    def get_current_business_id(self) -> Optional[str]:
        return self.current_business.id if self.current_business else None

    def has_businesses(self) -> bool:
        return len(self.user_businesses) > 0

    def get_business_by_id(self, business_id: str) -> Optional[Tenant]:
        return next((b for b in self.user_businesses if b.id == business_id), None)

    def to_legacy_dict(self) -> Dict[str, Any]:
        """Data fields under their legacy camelCase names."""
        user = self.current_user
        return {
            "currentBusiness": _legacy_business(self.current_business),
            "userBusinesses": [_legacy_business(b) for b in self.user_businesses],
            "loading": self.loading,
            "error": self.error,
            "userRole": self.user_role,
            "currentUser": (
                {"uid": user.id, "displayName": user.display_name} if user is not None else None
            ),
            "databasePaths": dict(self.database_paths) if self.database_paths else None,
            "permissions": sorted(self.get_user_permissions()),
            "isOwner": self.is_owner,
            "isManager": self.is_manager,
            "canSelectBusiness": self.can_select_business,
        }


def _legacy_business(tenant: Optional[Tenant]) -> Optional[Dict[str, Any]]:
    if tenant is None:
        return None
    return {**tenant.to_dict(), "businessName": tenant.name}


class ContextBridge:
    """Adapter from a BusinessContextSource to LegacyBusinessView."""

    def __init__(self, source: Optional[BusinessContextSource] = None) -> None:
        self._source = source if source is not None else UNAVAILABLE_CONTEXT

    @property
    def connected(self) -> bool:
        return self._source is not UNAVAILABLE_CONTEXT

    def view(self) -> LegacyBusinessView:
        try:
            return self._bridge(self._source, self.connected)
        except Exception:
            logger.exception("Failed to read business context, serving fallback")
            return self._bridge(UNAVAILABLE_CONTEXT, False)

    @staticmethod
    def _bridge(source: BusinessContextSource, connected: bool) -> LegacyBusinessView:
        paths = source.database_paths
        role = source.role
        return LegacyBusinessView(
            current_business=source.current,
            user_businesses=tuple(source.tenants),
            loading=source.loading,
            error=source.error,
            user_role=role.value if role is not None else None,
            current_user=source.identity,
            database_paths=MappingProxyType(dict(paths)) if paths is not None else None,
            is_owner=source.is_owner,
            is_manager=source.is_manager,
            can_select_business=source.can_select_multiple,
            has_permission=source.has_permission,
            get_user_permissions=source.get_user_permissions,
            select_business=source.select,
            clear_business_selection=source.clear_selection,
            refresh_business_data=source.refresh,
            connected=connected,
        )
