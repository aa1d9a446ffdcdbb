# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
BizScope Application Entry Point.

FastAPI app with lifespan, middleware and the business-context routers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bizscope.api.business import router as business_router
from bizscope.api.errors import APIError, api_error_handler
from bizscope.api.middleware import TraceMiddleware
from bizscope.api.observability import router as observability_router
from bizscope.core.config import settings
from bizscope.core.context import init_platform_context
from bizscope.core.logging import setup_logging
from bizscope.kernel.redis_client import close_redis_pool, get_redis_pool
from bizscope.storage.database import close_db, init_db

logger = logging.getLogger("bizscope.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup/shutdown of service resources."""
    setup_logging(settings.LOG_LEVEL)
    redis = await get_redis_pool()
    init_platform_context(redis)
    await init_db()
    logger.info("[BizScope] Service ready (env=%s)", settings.BIZSCOPE_ENV)
    yield
    await close_db()
    await close_redis_pool()
    logger.info("[BizScope] Shutdown complete")


app = FastAPI(
    title="BizScope",
    description="Business-context resolution and role-based access",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(TraceMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Error Handlers ──────────────────────────────────────────
app.add_exception_handler(APIError, api_error_handler)

# ── Routes ──────────────────────────────────────────────────
app.include_router(business_router, prefix="/api")
app.include_router(observability_router)
