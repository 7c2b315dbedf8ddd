#!/usr/bin/env python3
"""Example: Task sessions and isolated histories

Starts two task sessions, switches between them, and completes one. Each
session keeps its own history; only the completion summary reaches the
base conversation.

Usage:
    python examples/02_task_sessions.py

Requirements:
    pip install agent-session-context
"""
from __future__ import annotations

from agent_session_context import AgentContext, MessageLabel, TaskConfigTable


def main() -> None:
    context = AgentContext(TaskConfigTable.default())
    context.add_user_message("Hi, I have two jobs for you.")

    # Step 1: A video script task
    video = context.start_session("mulmo", initial_state={"current_phase": "planning"})
    context.add_user_message("A one-minute video about cats")
    print(f"Mode: {context.mode().value}, tools: {context.enabled_tool_names()[:3]}")

    # Step 2: Starting another task suspends the first
    parser = context.start_session("codegen")
    context.add_user_message("Write a CSV parser")
    print(f"Video session is now {video.status.value}")

    # Step 3: Switch back
    context.resume_session(video.id)
    context.add_user_message("Add a narration beat")
    print(f"Active: {context.active_session().id}")  # type: ignore[union-attr]

    # Step 4: Complete it; the summary lands in the base history
    summary = context.complete_current_session()
    print(f"Completed with summary: {summary}")

    for session_id in (video.id, parser.id):
        history = context.session_history(session_id)
        assert history is not None
        print(f"  {session_id}: {[m.content for m in history]}")

    completions = context.base_history.get_by_label(MessageLabel.TASK_COMPLETION)
    print(f"Base history: {len(context.base_history)} messages, {len(completions)} completion(s)")
    print(f"Status: {context.status()}")


if __name__ == "__main__":
    main()
