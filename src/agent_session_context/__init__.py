"""agent-session-context — Modes, task sessions and labelled history for agents.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import agent_session_context
>>> agent_session_context.__version__
'0.1.0'
"""
from __future__ import annotations

# Modes
from agent_session_context.modes.profiles import (
    DEFAULT_MODE,
    MODE_PROFILES,
    AgentMode,
    ModeProfile,
    get_mode_profile,
)
from agent_session_context.modes.stack import ModeStack, ModeStackEntry

# Task sessions
from agent_session_context.session.state import SessionStatus, TaskSession
from agent_session_context.session.registry import (
    IllegalTransitionError,
    SessionNotFoundError,
    SessionRegistry,
)

# History
from agent_session_context.history.message import (
    HistoryFilter,
    LabeledMessage,
    MessageLabel,
    MessageMetadata,
    MessagePriority,
    SummaryOptions,
)
from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.history.serializer import HistorySerializer

# Task configuration
from agent_session_context.tasks.config import (
    ConfigVersionError,
    PhaseNotFoundError,
    TaskConfig,
    TaskConfigTable,
    TaskNotFoundError,
    TaskPhase,
)
from agent_session_context.tasks.phases import TaskSessionState

# Context
from agent_session_context.context.agent_context import AgentContext, ContextConfig, ContextStatus

# LLM contract
from agent_session_context.llm.types import (
    BaseMessage,
    LLMProvider,
    LLMResponse,
    StopReason,
    TextBlock,
    ToolResult,
    ToolSchema,
    ToolUse,
    ToolUseBlock,
)
from agent_session_context.llm.dummy import DummyProvider

# Tools and agent loop
from agent_session_context.tools.registry import Tool, ToolRegistry
from agent_session_context.tools.builtin import build_core_tools
from agent_session_context.tools.session_tools import build_session_tools
from agent_session_context.agent.loop import AgentLoop, TurnEndReason, TurnOutcome

# Convenience
from agent_session_context.convenience import Agent

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Modes
    "DEFAULT_MODE",
    "MODE_PROFILES",
    "AgentMode",
    "ModeProfile",
    "ModeStack",
    "ModeStackEntry",
    "get_mode_profile",
    # Task sessions
    "IllegalTransitionError",
    "SessionNotFoundError",
    "SessionRegistry",
    "SessionStatus",
    "TaskSession",
    # History
    "HistoryFilter",
    "HistorySerializer",
    "LabeledHistory",
    "LabeledMessage",
    "MessageLabel",
    "MessageMetadata",
    "MessagePriority",
    "SummaryOptions",
    # Task configuration
    "ConfigVersionError",
    "PhaseNotFoundError",
    "TaskConfig",
    "TaskConfigTable",
    "TaskNotFoundError",
    "TaskPhase",
    "TaskSessionState",
    # Context
    "AgentContext",
    "ContextConfig",
    "ContextStatus",
    # LLM contract
    "BaseMessage",
    "DummyProvider",
    "LLMProvider",
    "LLMResponse",
    "StopReason",
    "TextBlock",
    "ToolResult",
    "ToolSchema",
    "ToolUse",
    "ToolUseBlock",
    # Tools and agent loop
    "Agent",
    "AgentLoop",
    "Tool",
    "ToolRegistry",
    "TurnEndReason",
    "TurnOutcome",
    "build_core_tools",
    "build_session_tools",
]
