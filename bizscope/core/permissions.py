# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Permission Evaluator — pure yes/no answers, no I/O.

Owners hold every permission. Managers hold exactly the permissions listed
on their profile. Any input has an answer: a missing or malformed profile
falls back to the minimal default instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any, FrozenSet, Iterable, Mapping, Optional

from bizscope.core.errors import UnsupportedRoleError
from bizscope.core.identity import Role

logger = logging.getLogger("bizscope.permissions")

ALL_PERMISSIONS: FrozenSet[str] = frozenset({"all"})
DEFAULT_MANAGER_PERMISSIONS: FrozenSet[str] = frozenset({"view_dashboard"})


def _role_of(role: Any) -> Optional[Role]:
    try:
        return Role.parse(role)
    except UnsupportedRoleError:
        return None


def _declared_permissions(profile: Any) -> Optional[FrozenSet[str]]:
    """Return the profile's permission set, or None when absent/unreadable."""
    if profile is None:
        return None
    if isinstance(profile, Mapping):
        raw = profile.get("permissions")
    else:
        raw = getattr(profile, "permissions", None)
    if raw is None:
        return None
    if isinstance(raw, str):
        return frozenset({raw})
    try:
        return frozenset(str(p) for p in raw)
    except TypeError:
        logger.warning("Ignoring malformed permissions on profile: %r", raw)
        return None


def has_permission(role: Any, profile: Any, permission: str) -> bool:
    parsed = _role_of(role)
    if parsed is Role.OWNER:
        return True
    if parsed is Role.MANAGER:
        return permission in (_declared_permissions(profile) or frozenset())
    return False


def get_user_permissions(role: Any, profile: Any) -> FrozenSet[str]:
    """Owners get the ALL_PERMISSIONS marker; everyone else their own list or the default."""
    if _role_of(role) is Role.OWNER:
        return ALL_PERMISSIONS
    declared = _declared_permissions(profile)
    if declared is None:
        return DEFAULT_MANAGER_PERMISSIONS
    return declared


def has_any_permission(role: Any, profile: Any, required: Iterable[str]) -> bool:
    """True when no permission is required or at least one of `required` is held."""
    required = list(required)
    if not required or _role_of(role) is Role.OWNER:
        return True
    return any(has_permission(role, profile, p) for p in required)


def check_role_access(role: Any, allowed_roles: Iterable[Any] = ()) -> bool:
    """Route-style gate: no restriction means everyone, otherwise role membership."""
    allowed = list(allowed_roles)
    if not allowed:
        return True
    parsed = _role_of(role)
    return parsed is not None and parsed in {_role_of(a) for a in allowed}
