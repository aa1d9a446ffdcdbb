# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure.

Only request-level problems become HTTP errors. A failed business
resolution is reported inside a normal context response.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        trace_id: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.trace_id = trace_id or str(uuid.uuid4())
        super().__init__(message)


class MissingSessionError(APIError):
    def __init__(self, trace_id: str = None):
        super().__init__(
            code="MISSING_SESSION",
            message="X-Session-Id header is required",
            status_code=400,
            trace_id=trace_id,
        )


class UnsupportedRoleAPIError(APIError):
    def __init__(self, role: Any, trace_id: str = None):
        super().__init__(
            code="UNSUPPORTED_ROLE",
            message=f"Unsupported role: {role!r}",
            status_code=400,
            details={"allowed": ["owner", "manager"]},
            trace_id=trace_id,
        )


class BusinessNotFoundAPIError(APIError):
    def __init__(self, business_id: str, trace_id: str = None):
        super().__init__(
            code="BUSINESS_NOT_FOUND",
            message=f"Business '{business_id}' is not available to this identity",
            status_code=404,
            trace_id=trace_id,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Global exception handler for APIError."""
    trace_id = getattr(request.state, "trace_id", None) or exc.trace_id
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "trace_id": trace_id,
            "details": exc.details,
        },
    )
