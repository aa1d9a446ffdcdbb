# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
BizScope Record Schema — the shapes that cross process boundaries.

  Tenant         a business as read from the document store
  SessionRecord  last-active business, persisted per browsing session

SessionRecord serializes with the camelCase field names other clients of
the session store already read (tenantId, tenantName, timestamp, managerId).
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now_ms() -> int:
    return int(time.time() * 1000)


class Tenant(BaseModel):
    """A business (tenant). Attributes beyond id/name are opaque."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Business id")
    name: str = Field(default="", description="Display name of the business")
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque business attributes, passed through untouched",
    )

    def to_dict(self) -> Dict[str, Any]:
        return {**self.attributes, "id": self.id, "name": self.name}


class SessionRecord(BaseModel):
    """Cross-reload memory of the last selected business."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tenant_id: str = Field(..., min_length=1, alias="tenantId")
    tenant_name: str = Field(default="", alias="tenantName")
    timestamp: int = Field(
        default_factory=_now_ms,
        description="Epoch milliseconds at write time",
    )
    manager_id: Optional[str] = Field(default=None, alias="managerId")

    @classmethod
    def for_tenant(cls, tenant: Tenant, manager_id: Optional[str] = None) -> "SessionRecord":
        return cls(tenant_id=tenant.id, tenant_name=tenant.name, manager_id=manager_id)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> "SessionRecord":
        return cls.model_validate_json(raw)
