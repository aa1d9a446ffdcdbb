# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
ORM Models — business records as kept in the document store.

Tables:
  - businesses: one row per business, owned by exactly one owner identity
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, JSON, String
from sqlalchemy.dialects.postgresql import JSONB

from bizscope.protocols.schema import Tenant
from bizscope.storage.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


# ── Businesses ──────────────────────────────────────────────

class Business(Base):
    __tablename__ = "businesses"

    id = Column(String(128), primary_key=True)
    owner_id = Column(String(128), nullable=False)
    name = Column(String(256), nullable=False, default="")
    attributes = Column(JSON().with_variant(JSONB, "postgresql"), default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_businesses_owner_created", "owner_id", "created_at"),
    )

    def to_tenant(self) -> Tenant:
        return Tenant(id=self.id, name=self.name or "", attributes=dict(self.attributes or {}))

    def __repr__(self):
        return f"<Business {self.id} owner={self.owner_id}>"
