# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Resolution Errors — the failure taxonomy of business-context resolution.

  transient      document-store I/O failure; retry or refresh may recover
  configuration  identity profile is wrong upstream; retrying will not help
  not_found      assigned business is gone; shown like a configuration error

Session-store failures are not part of this taxonomy: they degrade silently
inside the session store adapter.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    TRANSIENT = "transient"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"


class BizScopeError(Exception):
    """Base error with a stable code and a taxonomy kind."""

    code: str = "BIZSCOPE_ERROR"
    kind: ErrorKind = ErrorKind.TRANSIENT

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT


class TenantStoreError(BizScopeError):
    """The document store could not be read."""

    code = "STORE_UNAVAILABLE"
    kind = ErrorKind.TRANSIENT


class ManagerProfileIncompleteError(BizScopeError):
    code = "PROFILE_INCOMPLETE"
    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str = "Manager profile incomplete — missing business assignment"):
        super().__init__(message)


class AssignedBusinessNotFoundError(BizScopeError):
    code = "BUSINESS_NOT_FOUND"
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Assigned business not found or access denied"):
        super().__init__(message)


class UnsupportedRoleError(BizScopeError, ValueError):
    """Raised when an identity arrives with a role other than owner/manager."""

    code = "UNSUPPORTED_ROLE"
    kind = ErrorKind.CONFIGURATION

    def __init__(self, role: object):
        self.role = role
        super().__init__(f"Unsupported role: {role!r}")
