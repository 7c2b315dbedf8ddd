"""Provider-neutral LLM wire types.

All types are Pydantic BaseModel subclasses so that message content can be
validated on load and dumped to JSON without custom encoders.

Classes
-------
- TextBlock      — a plain text content block
- ToolUse        — a single tool invocation requested by the model
- ToolUseBlock   — a content block wrapping a ``ToolUse``
- ToolResult     — the string result returned for one ``ToolUse``
- BaseMessage    — ``{role, content}`` pair sent to the model
- ToolSchema     — name/description/JSON-schema of a callable tool
- LLMResponse    — content blocks plus stop reason
- StreamEvent    — incremental event emitted while a response streams
- LLMProvider    — protocol every provider implements
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Callable, Literal, Protocol, Union

from pydantic import BaseModel, Field


class StopReason(str, Enum):
    """Why the model stopped producing output."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"


class TextBlock(BaseModel):
    """A text content block."""

    type: Literal["text"] = "text"
    text: str


class ToolUse(BaseModel):
    """A tool invocation requested by the model.

    Parameters
    ----------
    id:
        Provider-assigned identifier, echoed back in the matching
        ``ToolResult``.
    name:
        Name of the tool to execute.
    input:
        Tool arguments as decoded JSON.
    """

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolUseBlock(BaseModel):
    """A content block carrying a ``ToolUse``."""

    type: Literal["tool_use"] = "tool_use"
    tool_use: ToolUse


ContentBlock = Annotated[Union[TextBlock, ToolUseBlock], Field(discriminator="type")]


class ToolResult(BaseModel):
    """Result of executing one tool call."""

    tool_use_id: str
    content: str


MessageContent = Union[str, list[ToolResult], list[ContentBlock]]


class BaseMessage(BaseModel):
    """The ``{role, content}`` shape consumed by an LLM provider."""

    role: Literal["user", "assistant"]
    content: MessageContent


class ToolSchema(BaseModel):
    """Description of a tool as advertised to the model."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )


class LLMResponse(BaseModel):
    """A complete model response."""

    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: StopReason = StopReason.END_TURN

    def tool_uses(self) -> list[ToolUse]:
        """Return every ``ToolUse`` in content order."""
        return [block.tool_use for block in self.content if isinstance(block, ToolUseBlock)]

    def text(self) -> str:
        """Return the concatenated text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))


class StreamEvent(BaseModel):
    """An incremental event emitted while a response is produced."""

    type: Literal["text", "tool_use_start", "done"]
    text: str | None = None
    tool_name: str | None = None


StreamCallback = Callable[[StreamEvent], None]


class LLMProvider(Protocol):
    """Contract for the external model call.

    Failures are raised to the caller; providers are not expected to retry.
    """

    name: str

    async def call(
        self,
        messages: list[BaseMessage],
        tools: list[ToolSchema],
        on_stream: StreamCallback | None = None,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        ...
