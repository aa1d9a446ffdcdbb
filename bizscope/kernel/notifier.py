# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Notifier — user-visible, transient messages raised during resolution.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol

logger = logging.getLogger("bizscope.notify")


class Notifier(Protocol):
    def error(self, message: str) -> None:
        ...

    def success(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Default notifier: messages only reach the log."""

    def error(self, message: str) -> None:
        logger.error("[notify] %s", message)

    def success(self, message: str) -> None:
        logger.info("[notify] %s", message)


class CollectingNotifier:
    """Keeps messages so a response can hand them to the UI."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, str]] = []

    def error(self, message: str) -> None:
        self.messages.append({"level": "error", "message": message})

    def success(self, message: str) -> None:
        self.messages.append({"level": "success", "message": message})
