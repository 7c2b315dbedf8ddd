"""Bounded per-turn agent loop.

One turn: lock the history, record the user input, then alternate model
calls and tool batches until the model ends its turn, a completion is
reported, or the iteration cap of the current mode is reached.

Classes
-------
- TurnEndReason  — why a turn stopped
- TurnOutcome    — result of ``AgentLoop.run_turn``
- AgentLoop      — drives one turn against an ``LLMProvider``
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from agent_session_context.context.agent_context import AgentContext
from agent_session_context.llm.types import (
    LLMProvider,
    LLMResponse,
    StopReason,
    StreamCallback,
    ToolUse,
)
from agent_session_context.tools.builtin import ATTEMPT_COMPLETION, WRITE_FILE
from agent_session_context.tools.registry import ToolRegistry, error_result

logger = logging.getLogger(__name__)


class TurnEndReason(str, Enum):
    END_TURN = "end_turn"
    COMPLETED = "completed"
    MAX_ITERATIONS = "max_iterations"


@dataclass(frozen=True)
class TurnOutcome:
    """What happened during one turn.

    Parameters
    ----------
    reason:
        Why the turn stopped.
    iterations:
        Number of model calls made.
    completion:
        The ``attempt_completion`` result, when the turn completed.
    last_response:
        The final model response, if any call was made.
    """

    reason: TurnEndReason
    iterations: int
    completion: str | None = None
    last_response: LLMResponse | None = None

    @property
    def completed(self) -> bool:
        return self.reason is TurnEndReason.COMPLETED


class AgentLoop:
    """Run turns of the agent against a provider.

    Parameters
    ----------
    provider:
        The model.  Its failures propagate out of ``run_turn``.
    context:
        Modes, sessions and history.
    tools:
        Executable tools.  Only those enabled by ``context`` are offered.
    on_stream:
        Optional callback forwarded to every model call.
    """

    def __init__(
        self,
        provider: LLMProvider,
        context: AgentContext,
        tools: ToolRegistry,
        on_stream: StreamCallback | None = None,
    ) -> None:
        self.provider = provider
        self.context = context
        self.tools = tools
        self.on_stream = on_stream

    async def run_turn(self, user_input: str) -> TurnOutcome:
        """Process one user input to the end of the turn.

        The turn lock is held for the whole call and released even when the
        provider raises.
        """
        ctx = self.context
        ctx.begin_turn()
        try:
            ctx.add_user_message(user_input)
            max_iterations = ctx.max_iterations()
            response: LLMResponse | None = None

            for iteration in range(1, max_iterations + 1):
                response = await self.provider.call(
                    ctx.to_base_messages(),
                    ctx.enabled_tools(self.tools.schemas()),
                    self.on_stream,
                    ctx.system_prompt(),
                )
                ctx.add_assistant_message(response.content)

                if response.stop_reason is StopReason.END_TURN:
                    return TurnOutcome(TurnEndReason.END_TURN, iteration, last_response=response)

                tool_uses = response.tool_uses()
                if not tool_uses:
                    continue

                completion = await self._run_tools(tool_uses)
                if completion is not None:
                    return TurnOutcome(
                        TurnEndReason.COMPLETED, iteration, completion, last_response=response
                    )

            logger.warning("AgentLoop: reached max iterations (%d)", max_iterations)
            return TurnOutcome(TurnEndReason.MAX_ITERATIONS, max_iterations, last_response=response)
        finally:
            ctx.end_turn()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _gate(self, tool_use: ToolUse) -> str | None:
        """Return a refusal message if ``tool_use`` may not run now."""
        ctx = self.context
        if not ctx.is_tool_enabled(tool_use.name):
            return error_result(
                f"tool {tool_use.name!r} is not available in mode {ctx.mode().value!r}"
            )
        if tool_use.name == WRITE_FILE and not ctx.can_write_files():
            return error_result(f"file writes are not allowed in mode {ctx.mode().value!r}")
        return None

    async def _run_tools(self, tool_uses: list[ToolUse]) -> str | None:
        """Execute one response's tool calls and record their results.

        Permission checks are made for the whole batch before anything runs.
        Results are appended after every call has finished, in call order.

        Returns
        -------
        str | None
            The completion result if the batch contained ``attempt_completion``.
        """
        refusals = [self._gate(use) for use in tool_uses]
        runnable = [
            index
            for index, (use, refusal) in enumerate(zip(tool_uses, refusals))
            if refusal is None and use.name != ATTEMPT_COMPLETION
        ]
        results = await self.tools.execute_batch(
            [tool_uses[i] for i in runnable], self.context
        )
        executed = dict(zip(runnable, results))

        completion: str | None = None
        for index, (use, refusal) in enumerate(zip(tool_uses, refusals)):
            if refusal is not None:
                logger.warning("AgentLoop: refused %r: %s", use.name, refusal)
                self.context.add_tool_result(use.name, use.id, refusal)
            elif use.name == ATTEMPT_COMPLETION:
                completion = str(use.input.get("result", ""))
                self.context.add_task_completion(completion)
            else:
                self.context.add_tool_result(use.name, use.id, executed[index])
        return completion
