#!/usr/bin/env python3
"""Example: Quickstart — agent-session-context

Minimal working example: run a few turns against the offline
``DummyProvider`` and inspect the labelled history.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install agent-session-context
"""
from __future__ import annotations

import agent_session_context
from agent_session_context import Agent, MessageLabel


def main() -> None:
    print(f"agent-session-context version: {agent_session_context.__version__}")

    # Step 1: An agent with the built-in tasks and the dummy model
    agent = Agent()
    print(f"Prompt: {agent.prompt()}")

    # Step 2: A plain conversational turn
    outcome = agent.ask("hello")
    print(f"Turn ended: {outcome.reason.value} after {outcome.iterations} call(s)")

    # Step 3: A turn that uses the calculator and then completes
    outcome = agent.ask("calculate 12 * 7")
    print(f"Completion: {outcome.completion}")

    # Step 4: Every message carries a label
    for message in agent.context.base_history:
        print(f"  {message.label.value:<20} {message.metadata.priority.value}")

    results = agent.context.base_history.get_by_label(MessageLabel.TOOL_RESULT)
    print(f"Tool results recorded: {len(results)}")


if __name__ == "__main__":
    main()
