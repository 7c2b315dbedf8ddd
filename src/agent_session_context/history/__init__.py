"""Conversation history subpackage.

Public surface
--------------
- LabeledHistory     — ordered, labelled, prioritised message log
- LabeledMessage     — one history entry
- MessageMetadata    — label, priority, timestamp, tool linkage, tags
- MessageLabel       — enum of entry labels
- MessagePriority    — enum: CRITICAL, HIGH, MEDIUM, LOW
- HistoryFilter      — filter predicates
- SummaryOptions     — summarization budget
- HistorySerializer  — JSON/YAML round-trip
"""
from __future__ import annotations

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.history.message import (
    HistoryFilter,
    LabeledMessage,
    MessageLabel,
    MessageMetadata,
    MessagePriority,
    SummaryOptions,
    default_priority,
    estimate_tokens,
)
from agent_session_context.history.serializer import HistorySerializer

__all__ = [
    "HistoryFilter",
    "HistorySerializer",
    "LabeledHistory",
    "LabeledMessage",
    "MessageLabel",
    "MessageMetadata",
    "MessagePriority",
    "SummaryOptions",
    "default_priority",
    "estimate_tokens",
]
