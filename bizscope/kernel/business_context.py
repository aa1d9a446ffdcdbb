# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Business Context — the value feature code reads.

Combines the resolver's output with path derivation and permission answers
for whichever identity was last fed in through `set_identity()`.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from bizscope.core import permissions
from bizscope.core.errors import ErrorKind
from bizscope.core.identity import Identity, Role
from bizscope.kernel.fsm import ResolverState
from bizscope.kernel.paths import derive_database_paths
from bizscope.kernel.resolver import BusinessContextResolver, ResolvedContext
from bizscope.protocols.schema import Tenant


class BusinessContext:
    def __init__(self, resolver: BusinessContextResolver) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> BusinessContextResolver:
        return self._resolver

    async def set_identity(self, identity: Optional[Identity]) -> ResolvedContext:
        """Entry point for identity-provider updates (sign-in, profile change, sign-out)."""
        return await self._resolver.resolve(identity)

    # ── State ───────────────────────────────────────────────────

    @property
    def snapshot(self) -> ResolvedContext:
        return self._resolver.context

    @property
    def tenants(self) -> Tuple[Tenant, ...]:
        return self.snapshot.tenants

    @property
    def current(self) -> Optional[Tenant]:
        return self.snapshot.current

    @property
    def loading(self) -> bool:
        return self.snapshot.loading

    @property
    def error(self) -> Optional[str]:
        return self.snapshot.error

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.snapshot.error_kind

    @property
    def state(self) -> ResolverState:
        return self.snapshot.state

    @property
    def identity(self) -> Optional[Identity]:
        return self._resolver.identity

    @property
    def role(self) -> Optional[Role]:
        identity = self.identity
        return identity.role if identity is not None else None

    @property
    def is_owner(self) -> bool:
        return self.role is Role.OWNER

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @property
    def can_select_multiple(self) -> bool:
        return self.is_owner and len(self.tenants) > 1

    @property
    def database_paths(self) -> Optional[Dict[str, str]]:
        return derive_database_paths(self.identity, self.current)

    # ── Actions ─────────────────────────────────────────────────

    async def select(self, tenant: Tenant) -> ResolvedContext:
        return await self._resolver.select(tenant)

    async def clear_selection(self) -> ResolvedContext:
        return await self._resolver.clear_selection()

    async def refresh(self) -> ResolvedContext:
        return await self._resolver.refresh()

    # ── Permissions ─────────────────────────────────────────────

    def has_permission(self, permission: str) -> bool:
        return permissions.has_permission(self.role, self.identity, permission)

    def has_any_permission(self, required: Iterable[str]) -> bool:
        return permissions.has_any_permission(self.role, self.identity, required)

    def get_user_permissions(self) -> FrozenSet[str]:
        return permissions.get_user_permissions(self.role, self.identity)

    # ── Export ──────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        identity = self.identity
        data = self.snapshot.to_dict()
        data.update(
            {
                "role": self.role.value if self.role else None,
                "identity": (
                    {"id": identity.id, "display_name": identity.display_name}
                    if identity is not None
                    else None
                ),
                "database_paths": self.database_paths,
                "permissions": sorted(self.get_user_permissions()) if identity else [],
                "is_owner": self.is_owner,
                "is_manager": self.is_manager,
                "can_select_multiple": self.can_select_multiple,
            }
        )
        return data
