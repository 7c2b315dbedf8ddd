"""Mode subpackage.

Public surface
--------------
- AgentMode       — enum of operating modes
- ModeProfile     — static per-mode settings
- MODE_PROFILES   — read-only mode → profile table
- ModeStack       — stack of mode frames with a permanent base
- ModeStackEntry  — one frame
"""
from __future__ import annotations

from agent_session_context.modes.profiles import (
    DEFAULT_MODE,
    MODE_PROFILES,
    SESSION_TOOL_NAMES,
    AgentMode,
    ModeProfile,
    get_mode_profile,
)
from agent_session_context.modes.stack import ModeStack, ModeStackEntry

__all__ = [
    "DEFAULT_MODE",
    "MODE_PROFILES",
    "SESSION_TOOL_NAMES",
    "AgentMode",
    "ModeProfile",
    "ModeStack",
    "ModeStackEntry",
    "get_mode_profile",
]
