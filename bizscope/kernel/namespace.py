# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Namespace Helper — Redis key isolation per browsing session.

All Redis keys are namespaced: bizscope:{scope_id}:{resource_type}:{resource_id}
so two browsing sessions never see each other's records.
"""

from __future__ import annotations

import re

KEY_PREFIX = "bizscope"

# Characters with meaning in a Redis MATCH glob
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def get_key(scope_id: str, resource_type: str, resource_id: str) -> str:
    """
    Build a scoped Redis key.

    Examples:
        get_key("bs_01", "session", "business_session")
            -> "bizscope:bs_01:session:business_session"
    """
    return f"{KEY_PREFIX}:{scope_id}:{resource_type}:{resource_id}"


def escape_glob(value: str) -> str:
    """Escape `value` so a MATCH pattern treats it literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


def get_session_pattern(scope_id: str) -> str:
    """Match every session-scoped key of one browsing session, and only it."""
    return f"{KEY_PREFIX}:{escape_glob(scope_id)}:session:*"
