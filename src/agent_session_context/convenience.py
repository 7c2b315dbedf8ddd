"""Convenience API for agent-session-context — 3-line quickstart.

Example
-------
::

    from agent_session_context import Agent
    agent = Agent()
    outcome = agent.ask("hello")

"""
from __future__ import annotations

import asyncio
from pathlib import Path

from agent_session_context.agent.loop import AgentLoop, TurnOutcome
from agent_session_context.context.agent_context import AgentContext, ContextConfig
from agent_session_context.llm.types import LLMProvider, StreamCallback
from agent_session_context.tasks.config import TaskConfigTable
from agent_session_context.tools.builtin import build_core_tools
from agent_session_context.tools.registry import ToolRegistry
from agent_session_context.tools.session_tools import build_session_tools


class Agent:
    """Zero-config agent wiring for the common case.

    Builds an ``AgentContext`` over the built-in task table, registers the
    core and session tools, and drives turns with an ``AgentLoop``.  Without
    a provider, the offline ``DummyProvider`` is used.

    Parameters
    ----------
    provider:
        The model to call.  Defaults to ``DummyProvider()``.
    workspace:
        Directory the file tools may access.  Default: current directory.
    task_table:
        Task configurations.  Defaults to ``TaskConfigTable.default()``.
    config:
        Context options.
    on_stream:
        Optional stream callback forwarded to the provider.
    """

    def __init__(
        self,
        provider: LLMProvider | None = None,
        workspace: str | Path = ".",
        task_table: TaskConfigTable | None = None,
        config: ContextConfig | None = None,
        on_stream: StreamCallback | None = None,
    ) -> None:
        if provider is None:
            from agent_session_context.llm.dummy import DummyProvider

            provider = DummyProvider()
        self.task_table = task_table if task_table is not None else TaskConfigTable.default()
        self.context = AgentContext(self.task_table, config)
        self.tools = ToolRegistry(
            [*build_core_tools(workspace), *build_session_tools(self.task_table)]
        )
        self.loop = AgentLoop(provider, self.context, self.tools, on_stream)

    @property
    def provider(self) -> LLMProvider:
        return self.loop.provider

    def prompt(self) -> str:
        """Return a shell-style prompt: ``[mode]`` or ``[mode:task]``."""
        mode = self.context.mode().value
        session = self.context.active_session()
        if session is None:
            return f"[{mode}]"
        return f"[{mode}:{session.task_type}]"

    async def send(self, text: str) -> TurnOutcome:
        """Run one turn for ``text``."""
        return await self.loop.run_turn(text)

    def ask(self, text: str) -> TurnOutcome:
        """Run one turn for ``text`` from synchronous code.

        Must not be called while an event loop is running in this thread.
        """
        return asyncio.run(self.send(text))

    def __repr__(self) -> str:
        return f"Agent(provider={self.provider.name!r}, mode={self.context.mode().value!r})"
