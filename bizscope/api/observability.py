# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Observability API — health check and resolution metrics.
"""

from __future__ import annotations

from fastapi import APIRouter

from bizscope.core.metrics import resolver_metrics

router = APIRouter(tags=["observability"])


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "version": "0.1.0",
        "metrics": resolver_metrics.snapshot(),
    }


@router.get("/api/metrics")
async def get_metrics():
    """Return current resolution metrics."""
    return resolver_metrics.snapshot()
