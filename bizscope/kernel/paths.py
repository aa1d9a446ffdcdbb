# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Path Deriver — tenant-scoped storage paths for every business resource.

  owners/{ownerId}/businesses/{businessId}              business
  owners/{ownerId}/businesses/{businessId}/{resource}   everything else

For an owner, ownerId is the owner's own id and businessId the selected
business. For a manager both come from the manager's assignment.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from bizscope.core.identity import Identity, ManagerIdentity, OwnerIdentity
from bizscope.protocols.schema import Tenant

BUSINESS_RESOURCE = "business"

RESOURCE_NAMES: Tuple[str, ...] = (
    BUSINESS_RESOURCE,
    "inventory",
    "customers",
    "employees",
    "suppliers",
    "orders",
    "transactions",
    "reports",
    "vehicles",
    "equipment",
)


def get_business_path(owner_id: str, business_id: str) -> str:
    """
    Examples:
        get_business_path("u1", "b1") -> "owners/u1/businesses/b1"
    """
    return f"owners/{owner_id}/businesses/{business_id}"


def get_resource_path(owner_id: str, business_id: str, resource: str) -> str:
    if resource == BUSINESS_RESOURCE:
        return get_business_path(owner_id, business_id)
    return f"{get_business_path(owner_id, business_id)}/{resource}"


def derive_database_paths(
    identity: Optional[Identity],
    current: Optional[Tenant],
) -> Optional[Dict[str, str]]:
    """Map every resource name to its path; None without an identity or a selected business."""
    if identity is None or current is None:
        return None

    if isinstance(identity, OwnerIdentity):
        owner_id, business_id = identity.id, current.id
    elif isinstance(identity, ManagerIdentity):
        owner_id, business_id = identity.owner_id, identity.tenant_id
        if not owner_id or not business_id:
            return None
    else:
        return None

    return {
        resource: get_resource_path(owner_id, business_id, resource)
        for resource in RESOURCE_NAMES
    }
