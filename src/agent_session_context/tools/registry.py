"""Tool registration and dispatch.

Classes
-------
- Tool          — a schema plus an async handler
- ToolRegistry  — name → tool table with error-to-string dispatch
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from agent_session_context.llm.types import ToolSchema, ToolUse

if TYPE_CHECKING:
    from agent_session_context.context.agent_context import AgentContext

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any], "AgentContext | None"], Awaitable[str]]


def error_result(message: str) -> str:
    """Format ``message`` as a tool error result."""
    return f"Error: {message}"


@dataclass(frozen=True)
class Tool:
    """An executable tool.

    Parameters
    ----------
    schema:
        Name, description and JSON input schema shown to the model.
    handler:
        ``async (input, context) -> str``.
    requires_context:
        When True, dispatch without an ``AgentContext`` yields an error
        result instead of calling the handler.
    """

    schema: ToolSchema
    handler: ToolHandler
    requires_context: bool = False

    @property
    def name(self) -> str:
        return self.schema.name


class ToolRegistry:
    """Register tools and execute them by name.

    ``execute`` never raises for tool-level problems: unknown tools, missing
    context and exceptions raised by a handler are all returned as
    ``"Error: ..."`` strings so the agent loop can record them like any other
    result.

    Parameters
    ----------
    tools:
        Initial tools.  A later tool with the same name replaces an earlier one.
    """

    def __init__(self, tools: Iterable[Tool] | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.debug("ToolRegistry: replacing tool %r", tool.name)
        self._tools[tool.name] = tool

    def register_many(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def schemas(self) -> list[ToolSchema]:
        """Return the schema of every registered tool, in registration order."""
        return [tool.schema for tool in self._tools.values()]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def execute(
        self,
        name: str,
        tool_input: dict[str, Any],
        context: AgentContext | None = None,
    ) -> str:
        """Run one tool and return its string result.

        Parameters
        ----------
        name:
            Registered tool name.
        tool_input:
            Arguments supplied by the model.
        context:
            Agent context passed to the handler.

        Returns
        -------
        str
            The handler's result, or an ``"Error: ..."`` string.
        """
        tool = self._tools.get(name)
        if tool is None:
            return error_result(f"unknown tool {name!r}")
        if tool.requires_context and context is None:
            return error_result(f"tool {name!r} requires an agent context")
        try:
            return await tool.handler(tool_input, context)
        except Exception as exc:  # noqa: BLE001
            logger.warning("ToolRegistry: tool %r failed: %s", name, exc)
            return error_result(str(exc))

    async def execute_batch(
        self,
        tool_uses: Sequence[ToolUse],
        context: AgentContext | None = None,
    ) -> list[str]:
        """Run every call of one model response concurrently.

        Results are returned in the order of ``tool_uses``.
        """
        return list(
            await asyncio.gather(
                *(self.execute(use.name, use.input, context) for use in tool_uses)
            )
        )

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
