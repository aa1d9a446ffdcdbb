# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Identity — who is asking, as supplied by the identity provider.

An identity is one of two variants:
  OwnerIdentity    owns one or more businesses and may switch between them
  ManagerIdentity  bound to exactly one business with a restricted permission set

Both are immutable snapshots; nothing in BizScope mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from bizscope.core.errors import ManagerProfileIncompleteError, UnsupportedRoleError


class Role(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Accept a Role or its (case-insensitive) string form."""
        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedRoleError(value)


@dataclass(frozen=True)
class OwnerIdentity:
    id: str
    display_name: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("identity id must not be empty")

    @property
    def role(self) -> Role:
        return Role.OWNER


@dataclass(frozen=True)
class ManagerIdentity:
    id: str
    owner_id: Optional[str] = None
    tenant_id: Optional[str] = None
    permissions: Optional[FrozenSet[str]] = None
    display_name: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("identity id must not be empty")
        if self.permissions is not None and not isinstance(self.permissions, frozenset):
            object.__setattr__(self, "permissions", frozenset(self.permissions))

    @property
    def role(self) -> Role:
        return Role.MANAGER

    def assignment(self) -> Tuple[str, str]:
        """
        Return (owner_id, tenant_id) for the business this manager works in.

        Raises ManagerProfileIncompleteError when either link is missing.
        """
        if not self.owner_id or not self.tenant_id:
            raise ManagerProfileIncompleteError()
        return self.owner_id, self.tenant_id


Identity = Union[OwnerIdentity, ManagerIdentity]


def _permission_set(raw: Any) -> Optional[FrozenSet[str]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        return frozenset(p.strip() for p in raw.split(",") if p.strip())
    if isinstance(raw, Iterable):
        return frozenset(str(p) for p in raw)
    return None


def identity_from_profile(profile: Mapping[str, Any], role: Any) -> Identity:
    """
    Build an Identity from an identity-provider user record.

    Accepts the provider's field names (uid/id, ownerId, businessId/tenantId,
    permissions, displayName) as well as their snake_case forms.
    """
    parsed = Role.parse(role)
    identity_id = profile.get("uid") or profile.get("id")
    display_name = profile.get("displayName") or profile.get("display_name") or ""

    if parsed is Role.OWNER:
        return OwnerIdentity(id=identity_id, display_name=display_name)

    return ManagerIdentity(
        id=identity_id,
        owner_id=profile.get("ownerId") or profile.get("owner_id"),
        tenant_id=(
            profile.get("businessId")
            or profile.get("tenantId")
            or profile.get("tenant_id")
        ),
        permissions=_permission_set(profile.get("permissions")),
        display_name=display_name,
    )
