"""LLM contract subpackage.

Public surface
--------------
- LLMProvider   — protocol for the external model call
- LLMResponse   — content blocks plus stop reason
- BaseMessage   — ``{role, content}`` message shape
- TextBlock / ToolUseBlock / ToolUse / ToolResult — content types
- ToolSchema    — tool advertisement
- DummyProvider — deterministic provider for tests
"""
from __future__ import annotations

from agent_session_context.llm.dummy import (
    DummyProvider,
    MockResponse,
    create_mock_response,
    create_tool_use_response,
)
from agent_session_context.llm.types import (
    BaseMessage,
    ContentBlock,
    LLMProvider,
    LLMResponse,
    MessageContent,
    StopReason,
    StreamCallback,
    StreamEvent,
    TextBlock,
    ToolResult,
    ToolSchema,
    ToolUse,
    ToolUseBlock,
)

__all__ = [
    "BaseMessage",
    "ContentBlock",
    "DummyProvider",
    "LLMProvider",
    "LLMResponse",
    "MessageContent",
    "MockResponse",
    "StopReason",
    "StreamCallback",
    "StreamEvent",
    "TextBlock",
    "ToolResult",
    "ToolSchema",
    "ToolUse",
    "ToolUseBlock",
    "create_mock_response",
    "create_tool_use_response",
]
