"""Labelled message domain models.

Classes
-------
- MessageLabel     — semantic label of a history entry
- MessagePriority  — retention priority used by summarization
- MessageMetadata  — label, priority, timestamp, tool linkage, tags, tokens
- LabeledMessage   — a ``{role, content}`` message plus metadata
- HistoryFilter    — predicate options for ``LabeledHistory.filter``
- SummaryOptions   — budget options for ``LabeledHistory.summarize``
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from agent_session_context.llm.types import BaseMessage, MessageContent

CHARS_PER_TOKEN = 4


class MessageLabel(str, Enum):
    """What a history entry represents."""

    USER_INPUT = "user_input"
    ASSISTANT_RESPONSE = "assistant_response"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    SYSTEM_CONTEXT = "system_context"
    TASK_COMPLETION = "task_completion"
    ERROR = "error"


class MessagePriority(str, Enum):
    """How strongly an entry should survive summarization."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


DEFAULT_PRIORITIES: dict[MessageLabel, MessagePriority] = {
    MessageLabel.USER_INPUT: MessagePriority.HIGH,
    MessageLabel.ASSISTANT_RESPONSE: MessagePriority.MEDIUM,
    MessageLabel.TOOL_CALL: MessagePriority.MEDIUM,
    MessageLabel.TOOL_RESULT: MessagePriority.MEDIUM,
    MessageLabel.SYSTEM_CONTEXT: MessagePriority.CRITICAL,
    MessageLabel.TASK_COMPLETION: MessagePriority.HIGH,
    MessageLabel.ERROR: MessagePriority.HIGH,
}


def default_priority(label: MessageLabel) -> MessagePriority:
    """Return the priority assigned to ``label`` when none is given."""
    return DEFAULT_PRIORITIES[label]


def estimate_tokens(content: MessageContent) -> int:
    """Estimate tokens as ``ceil(characters / 4)``.

    Strings are measured directly; block lists are measured on their compact
    JSON form.  This is a cheap heuristic, not a tokenizer.
    """
    if isinstance(content, str):
        text = content
    else:
        text = json.dumps(
            [block.model_dump(mode="json") for block in content],
            separators=(",", ":"),
            ensure_ascii=False,
        )
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class MessageMetadata(BaseModel):
    """Bookkeeping attached to every history entry.

    Parameters
    ----------
    label:
        Semantic label (see ``MessageLabel``).
    priority:
        Retention priority; defaults per label but mutable.
    timestamp:
        When the message was recorded (UTC).
    tool_name:
        Tool name for ``tool_call`` / ``tool_result`` entries.
    tool_use_id:
        Tool-use identifier linking a call to its result.
    tags:
        Free-form labels, without duplicates.
    token_count:
        Estimated token count of the content.
    parent_message_id:
        Optional id of a related earlier message.
    """

    label: MessageLabel
    priority: MessagePriority
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: str | None = None
    tool_use_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    token_count: int = 0
    parent_message_id: str | None = None

    model_config = {"frozen": False}


class LabeledMessage(BaseModel):
    """A conversation message tagged with ``MessageMetadata``."""

    id: str = Field(default_factory=lambda: f"msg_{uuid4().hex}")
    role: Literal["user", "assistant"]
    content: MessageContent
    metadata: MessageMetadata

    model_config = {"frozen": False}

    @property
    def label(self) -> MessageLabel:
        return self.metadata.label

    @property
    def priority(self) -> MessagePriority:
        return self.metadata.priority

    @property
    def timestamp(self) -> datetime:
        return self.metadata.timestamp

    def to_base_message(self) -> BaseMessage:
        """Drop the metadata, keeping only ``{role, content}``."""
        return BaseMessage(role=self.role, content=self.content)


@dataclass(frozen=True)
class HistoryFilter:
    """Predicates combined by ``LabeledHistory.filter``.

    Every set predicate left as ``None`` is not applied.  ``tags`` matches a
    message carrying *any* of the given tags.  Timestamp bounds are
    inclusive.  ``limit`` truncates the filtered result to its first N
    entries and is applied last.
    """

    labels: frozenset[MessageLabel] | None = None
    priorities: frozenset[MessagePriority] | None = None
    tags: frozenset[str] | None = None
    after: datetime | None = None
    before: datetime | None = None
    exclude_ids: frozenset[str] = field(default_factory=frozenset)
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative or None, got {self.limit!r}.")
        # Enum members hash by name, so plain strings must be coerced first.
        if self.labels is not None:
            object.__setattr__(self, "labels", frozenset(MessageLabel(v) for v in self.labels))
        if self.priorities is not None:
            object.__setattr__(
                self, "priorities", frozenset(MessagePriority(v) for v in self.priorities)
            )
        if self.tags is not None:
            object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "exclude_ids", frozenset(self.exclude_ids))

    def matches(self, message: LabeledMessage) -> bool:
        """Return True if ``message`` satisfies every predicate except ``limit``."""
        meta = message.metadata
        if self.labels is not None and meta.label not in self.labels:
            return False
        if self.priorities is not None and meta.priority not in self.priorities:
            return False
        if self.tags and not any(tag in self.tags for tag in meta.tags):
            return False
        if self.after is not None and meta.timestamp < self.after:
            return False
        if self.before is not None and meta.timestamp > self.before:
            return False
        return message.id not in self.exclude_ids


@dataclass(frozen=True)
class SummaryOptions:
    """Budget for ``LabeledHistory.summarize``.

    Parameters
    ----------
    max_messages:
        Hard cap on the result size.  Once reached, no further candidates
        are considered.  Preserved messages are always kept, even beyond it.
    max_tokens:
        Token ceiling for candidates.  A candidate that would exceed it is
        skipped and the walk continues with older candidates.
    preserve_labels:
        Labels whose messages are always kept.
    preserve_priorities:
        Priorities whose messages are always kept.
    """

    max_messages: int | None = None
    max_tokens: int | None = None
    preserve_labels: frozenset[MessageLabel] = field(default_factory=frozenset)
    preserve_priorities: frozenset[MessagePriority] = frozenset(
        {MessagePriority.CRITICAL, MessagePriority.HIGH}
    )

    def __post_init__(self) -> None:
        if self.max_messages is not None and self.max_messages < 1:
            raise ValueError(f"max_messages must be >= 1, got {self.max_messages!r}.")
        if self.max_tokens is not None and self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens!r}.")
        object.__setattr__(
            self, "preserve_labels", frozenset(MessageLabel(v) for v in self.preserve_labels)
        )
        object.__setattr__(
            self,
            "preserve_priorities",
            frozenset(MessagePriority(v) for v in self.preserve_priorities),
        )

    def preserves(self, message: LabeledMessage) -> bool:
        return (
            message.metadata.label in self.preserve_labels
            or message.metadata.priority in self.preserve_priorities
        )
