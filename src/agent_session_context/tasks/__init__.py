"""Task configuration subpackage.

Public surface
--------------
- TaskConfigTable     — injected table of task configurations
- TaskConfig          — one task type
- TaskPhase           — one phase of a task
- TaskSessionState    — phase progress stored in a session's state
- TaskNotFoundError   — unknown task
- PhaseNotFoundError  — unknown phase
- CORE_TOOLS          — tool names every task may enable
"""
from __future__ import annotations

from agent_session_context.tasks.config import (
    CORE_TOOLS,
    ConfigVersionError,
    PhaseNotFoundError,
    TaskConfig,
    TaskConfigFile,
    TaskConfigTable,
    TaskNotFoundError,
    TaskPhase,
)
from agent_session_context.tasks.phases import TaskSessionState, current_phase_of

__all__ = [
    "CORE_TOOLS",
    "ConfigVersionError",
    "PhaseNotFoundError",
    "TaskConfig",
    "TaskConfigFile",
    "TaskConfigTable",
    "TaskNotFoundError",
    "TaskPhase",
    "TaskSessionState",
    "current_phase_of",
]
