"""Agent context subpackage.

Public surface
--------------
- AgentContext   — composition root with turn locking
- ContextConfig  — construction options
- ContextStatus  — status snapshot
- TaskSummary    — one session inside a status snapshot
"""
from __future__ import annotations

from agent_session_context.context.agent_context import (
    AgentContext,
    ContextConfig,
    ContextStatus,
    TaskSummary,
)

__all__ = [
    "AgentContext",
    "ContextConfig",
    "ContextStatus",
    "TaskSummary",
]
