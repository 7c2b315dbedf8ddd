#!/usr/bin/env python3
"""Example: Summarizing and persisting a labelled history

Usage:
    python examples/03_history_summary.py

Requirements:
    pip install agent-session-context
"""
from __future__ import annotations

from agent_session_context import (
    HistorySerializer,
    LabeledHistory,
    MessagePriority,
    SummaryOptions,
)


def main() -> None:
    history = LabeledHistory()
    history.add_user_message("Project constraints: Python 3.10, no network", priority=MessagePriority.HIGH)
    for index in range(6):
        history.add_user_message(f"small talk {index}")
    history.add_error("disk quota exceeded")

    # Preserved priorities are always kept; the rest fill the budget newest first
    summary = history.summarize(SummaryOptions(max_messages=3))
    print(f"Kept {len(summary)} of {len(history)} messages:")
    for message in summary:
        print(f"  [{message.priority.value}] {message.content}")

    # Round trip through YAML
    serializer = HistorySerializer()
    text = serializer.serialize(LabeledHistory(summary), format="yaml")
    restored = serializer.deserialize(text, format="yaml")
    print(f"Restored {len(restored)} messages from YAML")


if __name__ == "__main__":
    main()
