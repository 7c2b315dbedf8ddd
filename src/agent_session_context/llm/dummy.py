"""Deterministic LLM provider for tests and offline demos.

Classes
-------
- MockResponse   — a regex pattern paired with a canned response
- DummyProvider  — pattern-matching provider with no network access

Functions
---------
- create_mock_response      — build a single-text-block response
- create_tool_use_response  — build a single-tool-call response
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from uuid import uuid4

from agent_session_context.llm.types import (
    BaseMessage,
    LLMResponse,
    StopReason,
    StreamCallback,
    StreamEvent,
    TextBlock,
    ToolResult,
    ToolSchema,
    ToolUse,
    ToolUseBlock,
)


@dataclass(frozen=True)
class MockResponse:
    """A canned response returned when ``pattern`` matches the last message."""

    pattern: re.Pattern[str]
    response: LLMResponse


def create_mock_response(
    text: str,
    stop_reason: StopReason = StopReason.END_TURN,
) -> LLMResponse:
    """Return a response holding a single text block."""
    return LLMResponse(content=[TextBlock(text=text)], stop_reason=stop_reason)


def create_tool_use_response(
    tool_name: str,
    tool_input: dict[str, object] | None = None,
    tool_use_id: str | None = None,
) -> LLMResponse:
    """Return a response requesting a single tool call."""
    tool_use = ToolUse(
        id=tool_use_id or f"tool_{uuid4().hex[:12]}",
        name=tool_name,
        input=dict(tool_input or {}),
    )
    return LLMResponse(content=[ToolUseBlock(tool_use=tool_use)], stop_reason=StopReason.TOOL_USE)


def _tool_call(text: str, tool_use_id: str, name: str, tool_input: dict[str, object]) -> LLMResponse:
    return LLMResponse(
        content=[
            TextBlock(text=text),
            ToolUseBlock(tool_use=ToolUse(id=tool_use_id, name=name, input=tool_input)),
        ],
        stop_reason=StopReason.TOOL_USE,
    )


DEFAULT_MOCK_RESPONSES: tuple[MockResponse, ...] = (
    MockResponse(
        re.compile(r"\b(hello|hi)\b", re.IGNORECASE),
        create_mock_response("Hello! How can I help you today?"),
    ),
    MockResponse(
        re.compile(r"calculate|\d+\s*[-+*/]\s*\d+", re.IGNORECASE),
        _tool_call("Running the calculation.", "tool_calc_001", "calculator", {"expression": "5 + 3"}),
    ),
    MockResponse(
        re.compile(r"read.*file", re.IGNORECASE),
        _tool_call("Reading the file.", "tool_read_001", "read_file", {"path": "example.txt"}),
    ),
    MockResponse(
        re.compile(r"write.*file", re.IGNORECASE),
        _tool_call(
            "Writing the file.",
            "tool_write_001",
            "write_file",
            {"path": "output.txt", "content": "test content"},
        ),
    ),
    MockResponse(
        re.compile(r"\blist\b", re.IGNORECASE),
        _tool_call("Listing files.", "tool_list_001", "list_files", {}),
    ),
    MockResponse(
        re.compile(r"\btime\b", re.IGNORECASE),
        _tool_call("Checking the current time.", "tool_time_001", "get_current_time", {}),
    ),
    MockResponse(
        re.compile(r"\b(done|finish)\b", re.IGNORECASE),
        create_tool_use_response(
            "attempt_completion", {"result": "The task is complete."}, "tool_complete_001"
        ),
    ),
)

TOOL_RESULT_RESPONSE: LLMResponse = create_tool_use_response(
    "attempt_completion",
    {"result": "Reviewed the tool output. The task is complete."},
    "tool_complete_002",
)

FALLBACK_RESPONSE: LLMResponse = create_mock_response("Sorry, I did not understand that request.")


class DummyProvider:
    """Pattern-matching provider that never touches the network.

    The last message of the conversation decides the response:

    - a tool-result message yields ``tool_result_response``;
    - a text message is matched against ``mock_responses`` in order;
    - anything else yields ``fallback_response``.

    Every call is recorded in ``calls`` so tests can inspect what the agent
    loop sent.

    Parameters
    ----------
    mock_responses:
        Ordered pattern table.  Defaults to ``DEFAULT_MOCK_RESPONSES``.
    tool_result_response:
        Response returned after tool results.
    fallback_response:
        Response returned when nothing matches.
    """

    name = "dummy"

    def __init__(
        self,
        mock_responses: tuple[MockResponse, ...] | list[MockResponse] | None = None,
        tool_result_response: LLMResponse | None = None,
        fallback_response: LLMResponse | None = None,
    ) -> None:
        self.mock_responses = tuple(mock_responses if mock_responses is not None else DEFAULT_MOCK_RESPONSES)
        self.tool_result_response = tool_result_response or TOOL_RESULT_RESPONSE
        self.fallback_response = fallback_response or FALLBACK_RESPONSE
        self.calls: list[dict[str, object]] = []

    async def call(
        self,
        messages: list[BaseMessage],
        tools: list[ToolSchema],
        on_stream: StreamCallback | None = None,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "tools": [tool.name for tool in tools],
                "system_prompt": system_prompt,
            }
        )
        response = self._find_response(messages[-1] if messages else None)

        if on_stream is not None:
            for block in response.content:
                if isinstance(block, TextBlock):
                    on_stream(StreamEvent(type="text", text=block.text))
                else:
                    on_stream(StreamEvent(type="tool_use_start", tool_name=block.tool_use.name))
            on_stream(StreamEvent(type="done"))

        return response.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_response(self, message: BaseMessage | None) -> LLMResponse:
        if message is None:
            return self.fallback_response
        if _is_tool_result_message(message):
            return self.tool_result_response

        text = _extract_text(message)
        if not text:
            return self.fallback_response

        for mock in self.mock_responses:
            if mock.pattern.search(text):
                return mock.response
        return self.fallback_response


def _is_tool_result_message(message: BaseMessage) -> bool:
    content = message.content
    return isinstance(content, list) and bool(content) and isinstance(content[0], ToolResult)


def _extract_text(message: BaseMessage) -> str:
    if isinstance(message.content, str):
        return message.content
    return " ".join(block.text for block in message.content if isinstance(block, TextBlock))
