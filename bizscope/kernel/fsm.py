# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Resolver FSM — lifecycle of a business-context resolution.

    any     -[IDENTITY_CHANGED]-> loading
    any     -[IDENTITY_CLEARED]-> idle
    loading -[RESOLVED]-> loaded
    loading -[FAILED]-> failed
    loaded  -[SELECTED | SELECTION_CLEARED | REFRESHED]-> loaded
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Tuple

logger = logging.getLogger("bizscope.fsm")


class ResolverState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


# Events
IDENTITY_CHANGED = "IDENTITY_CHANGED"
IDENTITY_CLEARED = "IDENTITY_CLEARED"
RESOLVED = "RESOLVED"
FAILED = "FAILED"
SELECTED = "SELECTED"
SELECTION_CLEARED = "SELECTION_CLEARED"
REFRESHED = "REFRESHED"

_ALL_STATES = ["idle", "loading", "loaded", "failed"]

RESOLVER_FSM_CONFIG: Dict[str, Any] = {
    "states": _ALL_STATES,
    "initial_state": "idle",
    "transitions": [
        {"from": _ALL_STATES, "event": IDENTITY_CHANGED, "to": "loading"},
        {"from": _ALL_STATES, "event": IDENTITY_CLEARED, "to": "idle"},
        {"from": "loading", "event": RESOLVED, "to": "loaded"},
        {"from": "loading", "event": FAILED, "to": "failed"},
        {"from": "loaded", "event": SELECTED, "to": "loaded"},
        {"from": "loaded", "event": SELECTION_CLEARED, "to": "loaded"},
        {"from": "loaded", "event": REFRESHED, "to": "loaded"},
    ],
}


class InvalidTransitionError(Exception):
    """Raised when an FSM transition is not permitted."""
    pass


class ResolverFSM:
    """
    Table-driven state machine holding the resolver's current state.

    A transition's "from" may be a single state or a list of states.
    """

    def __init__(self, config: Dict[str, Any] = RESOLVER_FSM_CONFIG) -> None:
        self._states: List[str] = list(config.get("states", []))
        self._initial_state = ResolverState(config.get("initial_state", "idle"))
        self._lookup: Dict[Tuple[str, str], str] = {}
        for t in config.get("transitions", []):
            sources = t["from"] if isinstance(t["from"], list) else [t["from"]]
            for source in sources:
                self._lookup[(source, t["event"])] = t["to"]
        self._state = self._initial_state

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def states(self) -> List[str]:
        return list(self._states)

    def transition(self, current_state: str, event_type: str) -> ResolverState:
        """
        Compute the next state given current state and event type.

        Raises InvalidTransitionError if no matching rule exists.
        """
        key = (ResolverState(current_state).value, event_type)
        if key not in self._lookup:
            raise InvalidTransitionError(
                f"No transition from state '{key[0]}' on event '{event_type}'"
            )
        return ResolverState(self._lookup[key])

    def can_fire(self, event_type: str) -> bool:
        return (self._state.value, event_type) in self._lookup

    def fire(self, event_type: str) -> ResolverState:
        """Apply an event to the held state and return the new state."""
        previous = self._state
        self._state = self.transition(previous, event_type)
        if self._state is not previous:
            logger.debug("Resolver transition: %s -[%s]-> %s", previous.value, event_type, self._state.value)
        return self._state

    def get_valid_events(self, current_state: str) -> List[str]:
        state = ResolverState(current_state).value
        return [event for (source, event) in self._lookup if source == state]

    def reset(self) -> None:
        self._state = self._initial_state
