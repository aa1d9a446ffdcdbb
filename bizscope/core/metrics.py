# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Metrics — In-memory counters for resolution observability.

Counters used across the service:
  - resolve_started / resolve_completed / resolve_discarded
  - resolve_failed:{kind}      (transient | configuration | not_found)
  - session_restored / session_store_error
  - owner_action_ignored       (select/clear attempted by a non-owner)
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any, Dict, List

MAX_OBSERVATIONS = 1000


class Metrics:
    """Simple in-memory metrics collector."""

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._histograms: Dict[str, List[float]] = defaultdict(list)
        self._start_time = time.time()

    # ── Counters ────────────────────────────────────────────────

    def inc(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    # ── Gauges ──────────────────────────────────────────────────

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def get_gauge(self, name: str) -> float:
        return self._gauges.get(name, 0.0)

    # ── Histograms (resolution latency) ─────────────────────────

    def observe(self, name: str, value: float) -> None:
        """Record an observation, e.g. resolution time in ms."""
        values = self._histograms[name]
        values.append(value)
        if len(values) > MAX_OBSERVATIONS:
            del values[:-MAX_OBSERVATIONS]

    def reset(self) -> None:
        """Drop everything recorded so far (tests, admin reset)."""
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()
        self._start_time = time.time()

    # ── Export ──────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        """Export all metrics as a dict."""
        result = {
            "uptime_seconds": round(time.time() - self._start_time, 1),
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
        }
        for name, values in self._histograms.items():
            if values:
                result[f"histogram_{name}"] = {
                    "count": len(values),
                    "avg": round(sum(values) / len(values), 2),
                    "max": round(max(values), 2),
                    "min": round(min(values), 2),
                }
        return result


# Global singleton
resolver_metrics = Metrics()
