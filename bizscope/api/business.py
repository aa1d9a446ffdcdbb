# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Business Context API — resolution, selection and permission queries.

Every route resolves the caller's context first. Resolution failures come
back in the body (`error`, `error_kind`), never as an HTTP error.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bizscope.api.deps import ResolvedRequest, get_browser_session_id, get_resolved_context
from bizscope.api.errors import BusinessNotFoundAPIError
from bizscope.core.context import get_platform_context
from bizscope.kernel.bridge import ContextBridge

router = APIRouter(prefix="/business", tags=["business"])


class SelectBusinessRequest(BaseModel):
    business_id: str = Field(..., min_length=1)


def _context_body(resolved: ResolvedRequest) -> Dict[str, Any]:
    body = resolved.context.to_dict()
    body["notifications"] = resolved.notifications
    return body


@router.get("/context")
async def get_context(resolved: ResolvedRequest = Depends(get_resolved_context)):
    """Resolve and return the caller's business context."""
    return _context_body(resolved)


@router.post("/select")
async def select_business(
    req: SelectBusinessRequest,
    resolved: ResolvedRequest = Depends(get_resolved_context),
):
    """Switch the current business (owners; a no-op for managers)."""
    ctx = resolved.context
    tenant = ctx.snapshot.find(req.business_id)
    if tenant is None and ctx.is_owner:
        raise BusinessNotFoundAPIError(req.business_id)
    if tenant is not None:
        await ctx.select(tenant)
    return _context_body(resolved)


@router.delete("/selection")
async def clear_selection(resolved: ResolvedRequest = Depends(get_resolved_context)):
    await resolved.context.clear_selection()
    return _context_body(resolved)


@router.post("/refresh")
async def refresh_business(resolved: ResolvedRequest = Depends(get_resolved_context)):
    """Re-read the current business record."""
    await resolved.context.refresh()
    return _context_body(resolved)


@router.get("/permissions")
async def list_permissions(resolved: ResolvedRequest = Depends(get_resolved_context)):
    ctx = resolved.context
    return {
        "role": ctx.role.value if ctx.role else None,
        "permissions": sorted(ctx.get_user_permissions()) if ctx.identity else [],
    }


@router.get("/permissions/{permission}")
async def check_permission(
    permission: str,
    resolved: ResolvedRequest = Depends(get_resolved_context),
):
    return {
        "permission": permission,
        "granted": resolved.context.has_permission(permission),
    }


@router.get("/legacy")
async def get_legacy_context(resolved: ResolvedRequest = Depends(get_resolved_context)):
    """The context in the legacy camelCase shape older clients expect."""
    return ContextBridge(resolved.context).view().to_legacy_dict()


@router.post("/session/reset")
async def reset_session(browser_session_id: str = Depends(get_browser_session_id)):
    """Forget persisted selections for this browsing session (fresh app start)."""
    store = get_platform_context().get_session_store(browser_session_id)
    removed = await store.clear_all()
    return {"session_id": browser_session_id, "removed": removed}
