# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Business Context Resolver — decides which business an identity works in.

Owner:   list owned businesses, restore the last selection from the session
         store, otherwise auto-select when exactly one business exists.
Manager: load the single assigned business and always persist it.

Every resolution takes a generation token. A result that comes back after a
newer resolution has started is discarded, so only the latest identity's
outcome is ever observable. Public operations never raise: failures become
state (`error`, `error_kind`) and a notification.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from bizscope.core.errors import (
    AssignedBusinessNotFoundError,
    BizScopeError,
    ErrorKind,
    TenantStoreError,
    UnsupportedRoleError,
)
from bizscope.core.identity import Identity, ManagerIdentity, OwnerIdentity
from bizscope.core.metrics import resolver_metrics
from bizscope.kernel.fsm import (
    FAILED,
    IDENTITY_CHANGED,
    IDENTITY_CLEARED,
    REFRESHED,
    RESOLVED,
    SELECTED,
    SELECTION_CLEARED,
    ResolverFSM,
    ResolverState,
)
from bizscope.kernel.notifier import LoggingNotifier, Notifier
from bizscope.memory.session_store import SessionStore
from bizscope.protocols.schema import SessionRecord, Tenant
from bizscope.storage.repositories import TenantStore

logger = logging.getLogger("bizscope.resolver")

Listener = Callable[["ResolvedContext"], None]


@dataclass(frozen=True)
class ResolvedContext:
    """Read-only snapshot of the resolver's output."""

    state: ResolverState = ResolverState.IDLE
    tenants: Tuple[Tenant, ...] = ()
    current: Optional[Tenant] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def loading(self) -> bool:
        return self.state is ResolverState.LOADING

    def find(self, tenant_id: str) -> Optional[Tenant]:
        return next((t for t in self.tenants if t.id == tenant_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "tenants": [t.to_dict() for t in self.tenants],
            "current": self.current.to_dict() if self.current else None,
            "loading": self.loading,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }


class _Outcome(NamedTuple):
    tenants: Sequence[Tenant]
    current: Optional[Tenant]
    record: Optional[SessionRecord]


class BusinessContextResolver:
    """
    Central state machine of business-context resolution.

    Construct one per consumer of the state and feed it identities through
    `resolve()`; read the result from `context`.
    """

    def __init__(
        self,
        tenant_store: TenantStore,
        session_store: SessionStore,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._tenant_store = tenant_store
        self._session_store = session_store
        self._notifier = notifier or LoggingNotifier()
        self._fsm = ResolverFSM()
        self._context = ResolvedContext()
        self._identity: Optional[Identity] = None
        self._generation = 0
        self._store_lock = asyncio.Lock()
        self._listeners: List[Listener] = []

    @property
    def context(self) -> ResolvedContext:
        return self._context

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def state(self) -> ResolverState:
        return self._fsm.state

    @property
    def generation(self) -> int:
        return self._generation

    # ── Listeners ───────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new context; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, context: ResolvedContext) -> None:
        self._context = context
        for listener in list(self._listeners):
            try:
                listener(context)
            except Exception:
                logger.exception("Context listener failed")

    def _transition(self, event: str, context: ResolvedContext) -> None:
        self._fsm.fire(event)
        self._publish(context)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _discard(self, generation: int) -> None:
        resolver_metrics.inc("resolve_discarded")
        logger.debug(
            "Discarding superseded resolution #%d (latest #%d)",
            generation, self._generation,
        )

    # ── Session Record ──────────────────────────────────────────
    # Store access is serialized, so a newer resolution only touches the
    # record after an older write has landed and been checked.

    async def _persist(self, record: SessionRecord, generation: int) -> None:
        async with self._store_lock:
            if self._is_stale(generation):
                return
            await self._session_store.set(record)
            if self._is_stale(generation):
                logger.debug("Reverting session record of superseded resolution #%d", generation)
                await self._session_store.clear()

    async def _forget(self, generation: int) -> None:
        async with self._store_lock:
            if not self._is_stale(generation):
                await self._session_store.clear()

    # ── Resolve ─────────────────────────────────────────────────

    async def resolve(self, identity: Optional[Identity]) -> ResolvedContext:
        """
        (Re)compute the business set and current business for `identity`.

        `None` means signed out: the resolver goes idle and leaves the
        session record alone.
        """
        self._generation += 1
        generation = self._generation
        self._identity = identity

        if identity is None:
            self._transition(IDENTITY_CLEARED, ResolvedContext())
            return self._context

        self._transition(IDENTITY_CHANGED, ResolvedContext(state=ResolverState.LOADING))
        resolver_metrics.inc("resolve_started")
        start = time.time()

        try:
            if isinstance(identity, OwnerIdentity):
                outcome = await self._resolve_owner(identity, generation)
            elif isinstance(identity, ManagerIdentity):
                outcome = await self._resolve_manager(identity, generation)
            else:
                raise UnsupportedRoleError(type(identity).__name__)
        except BizScopeError as e:
            await self._fail(e, generation)
            return self._context
        except Exception as e:
            logger.exception("Error loading business data", extra={"identity_id": identity.id})
            await self._fail(TenantStoreError(str(e) or type(e).__name__), generation)
            return self._context

        if outcome is None or self._is_stale(generation):
            self._discard(generation)
            return self._context

        self._transition(
            RESOLVED,
            ResolvedContext(
                state=ResolverState.LOADED,
                tenants=tuple(outcome.tenants),
                current=outcome.current,
            ),
        )
        resolver_metrics.inc("resolve_completed")
        resolver_metrics.observe("resolve_latency_ms", (time.time() - start) * 1000)

        if outcome.record is not None:
            await self._persist(outcome.record, generation)
        if isinstance(identity, ManagerIdentity) and outcome.current is not None:
            self._notifier.success(f"Connected to {outcome.current.name or 'business'}")
        return self._context

    async def _resolve_owner(
        self, identity: OwnerIdentity, generation: int
    ) -> Optional[_Outcome]:
        tenants = await self._tenant_store.list_owned_tenants(identity.id)
        if self._is_stale(generation):
            return None

        async with self._store_lock:
            saved = await self._session_store.get()
        if self._is_stale(generation):
            return None

        if saved is not None:
            restored = next((t for t in tenants if t.id == saved.tenant_id), None)
            if restored is not None:
                resolver_metrics.inc("session_restored")
                logger.info(
                    "Restored business selection: %s", restored.name,
                    extra={"identity_id": identity.id, "tenant_id": restored.id},
                )
                return _Outcome(tenants, restored, None)
            logger.info(
                "Dropping session record for business %s no longer owned",
                saved.tenant_id,
                extra={"identity_id": identity.id},
            )
            await self._forget(generation)
            if self._is_stale(generation):
                return None

        if len(tenants) == 1:
            return _Outcome(tenants, tenants[0], SessionRecord.for_tenant(tenants[0]))
        return _Outcome(tenants, None, None)

    async def _resolve_manager(
        self, identity: ManagerIdentity, generation: int
    ) -> Optional[_Outcome]:
        owner_id, tenant_id = identity.assignment()
        logger.info(
            "Loading manager business",
            extra={"identity_id": identity.id, "tenant_id": tenant_id},
        )
        tenant = await self._tenant_store.get_tenant(owner_id, tenant_id)
        if self._is_stale(generation):
            return None
        if tenant is None:
            raise AssignedBusinessNotFoundError()
        return _Outcome([tenant], tenant, SessionRecord.for_tenant(tenant, manager_id=identity.id))

    async def _fail(self, error: BizScopeError, generation: int) -> None:
        if self._is_stale(generation):
            self._discard(generation)
            return
        self._transition(
            FAILED,
            ResolvedContext(
                state=ResolverState.FAILED,
                error=error.message,
                error_kind=error.kind,
            ),
        )
        resolver_metrics.inc(f"resolve_failed:{error.kind.value}")
        logger.error("Business resolution failed [%s]: %s", error.code, error.message)
        self._notifier.error(f"Failed to load business data: {error.message}")
        await self._forget(generation)

    # ── Owner Actions ───────────────────────────────────────────

    def _owner_action_allowed(self, action: str) -> bool:
        if not isinstance(self._identity, OwnerIdentity):
            resolver_metrics.inc("owner_action_ignored")
            logger.warning("Only owners can %s", action)
            return False
        if self._fsm.state is not ResolverState.LOADED:
            logger.warning(
                "Cannot %s while resolution is %s", action, self._fsm.state.value
            )
            return False
        return True

    async def select(self, tenant: Tenant) -> ResolvedContext:
        """Make `tenant` the current business (owners only) and persist it."""
        if not self._owner_action_allowed("select different businesses"):
            return self._context
        if self._context.find(tenant.id) is None:
            logger.warning("Selecting business %s outside the resolved set", tenant.id)

        self._transition(SELECTED, dataclasses.replace(self._context, current=tenant))
        await self._persist(SessionRecord.for_tenant(tenant), self._generation)
        logger.info("Business selected: %s", tenant.name, extra={"tenant_id": tenant.id})
        return self._context

    async def clear_selection(self) -> ResolvedContext:
        """Forget the current business (owners only)."""
        if not self._owner_action_allowed("clear business selection"):
            return self._context

        self._transition(SELECTION_CLEARED, dataclasses.replace(self._context, current=None))
        await self._forget(self._generation)
        logger.info("Business selection cleared")
        return self._context

    # ── Refresh ─────────────────────────────────────────────────

    async def refresh(self) -> ResolvedContext:
        """Re-read the current business record and replace it in place."""
        current = self._context.current
        identity = self._identity
        if current is None or identity is None:
            return self._context

        generation = self._generation
        if isinstance(identity, ManagerIdentity):
            owner_id, tenant_id = identity.owner_id, identity.tenant_id
        else:
            owner_id, tenant_id = identity.id, current.id

        try:
            updated = await self._tenant_store.get_tenant(owner_id, tenant_id)
        except Exception as e:
            logger.error("Error refreshing business data: %s", e, extra={"tenant_id": tenant_id})
            return self._context

        if self._is_stale(generation):
            self._discard(generation)
            return self._context
        latest = self._context.current
        if updated is None or latest is None or latest.id != updated.id:
            return self._context

        tenants = tuple(updated if t.id == updated.id else t for t in self._context.tenants)
        self._transition(
            REFRESHED,
            dataclasses.replace(self._context, tenants=tenants, current=updated),
        )
        return self._context
