"""Labelled, prioritised conversation history.

Provides ``LabeledHistory``, an ordered and mutable log of
``LabeledMessage`` objects with filtering, a priority-aware summarization
policy, and a JSON round-trip.

Classes
-------
- LabeledHistory  — conversation log for one session (or the base context)
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence

from pydantic import TypeAdapter

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
from agent_session_context.llm.types import (
    BaseMessage,
    ContentBlock,
    MessageContent,
    TextBlock,
    ToolResult,
)

logger = logging.getLogger(__name__)

_MESSAGE_LIST = TypeAdapter(list[LabeledMessage])


class LabeledHistory:
    """Ordered log of labelled messages.

    Every ``add_*`` method builds a ``LabeledMessage`` with a fresh id, the
    current UTC timestamp, the label implied by the method, that label's
    default priority (unless ``priority`` is given), and an estimated token
    count.  Mutators that reference an unknown id are silent no-ops.

    Parameters
    ----------
    messages:
        Optional initial messages, kept in the given order.
    """

    def __init__(self, messages: Sequence[LabeledMessage] | None = None) -> None:
        self._messages: list[LabeledMessage] = list(messages or [])

    # ------------------------------------------------------------------
    # Add operations
    # ------------------------------------------------------------------

    def _append(
        self,
        role: str,
        content: MessageContent,
        label: MessageLabel,
        *,
        priority: MessagePriority | None = None,
        tool_name: str | None = None,
        tool_use_id: str | None = None,
        tags: Sequence[str] | None = None,
        parent_message_id: str | None = None,
    ) -> LabeledMessage:
        metadata = MessageMetadata(
            label=label,
            priority=priority or default_priority(label),
            tool_name=tool_name,
            tool_use_id=tool_use_id,
            tags=list(dict.fromkeys(tags or [])),
            token_count=estimate_tokens(content),
            parent_message_id=parent_message_id,
        )
        message = LabeledMessage(role=role, content=content, metadata=metadata)
        self._messages.append(message)
        return message

    def add_user_message(
        self,
        content: str,
        tags: Sequence[str] | None = None,
        *,
        priority: MessagePriority | None = None,
        parent_message_id: str | None = None,
    ) -> LabeledMessage:
        """Append user input."""
        return self._append(
            "user",
            content,
            MessageLabel.USER_INPUT,
            priority=priority,
            tags=tags,
            parent_message_id=parent_message_id,
        )

    def add_assistant_message(
        self,
        content: Sequence[ContentBlock],
        tags: Sequence[str] | None = None,
        *,
        priority: MessagePriority | None = None,
        parent_message_id: str | None = None,
    ) -> LabeledMessage:
        """Append a model response made of content blocks."""
        return self._append(
            "assistant",
            list(content),
            MessageLabel.ASSISTANT_RESPONSE,
            priority=priority,
            tags=tags,
            parent_message_id=parent_message_id,
        )

    def add_tool_call(
        self,
        tool_name: str,
        tool_use_id: str,
        content: Sequence[ContentBlock],
        *,
        priority: MessagePriority | None = None,
        parent_message_id: str | None = None,
    ) -> LabeledMessage:
        """Append an assistant message that requests a tool call."""
        return self._append(
            "assistant",
            list(content),
            MessageLabel.TOOL_CALL,
            priority=priority,
            tool_name=tool_name,
            tool_use_id=tool_use_id,
            parent_message_id=parent_message_id,
        )

    def add_tool_result(
        self,
        tool_name: str,
        tool_use_id: str,
        result: str,
        *,
        priority: MessagePriority | None = None,
        parent_message_id: str | None = None,
    ) -> LabeledMessage:
        """Append the string result of a tool call as a user-role message."""
        return self._append(
            "user",
            [ToolResult(tool_use_id=tool_use_id, content=result)],
            MessageLabel.TOOL_RESULT,
            priority=priority,
            tool_name=tool_name,
            tool_use_id=tool_use_id,
            parent_message_id=parent_message_id,
        )

    def add_task_completion(
        self, result: str, *, priority: MessagePriority | None = None
    ) -> LabeledMessage:
        """Append a task-completion note."""
        return self._append(
            "assistant", [TextBlock(text=result)], MessageLabel.TASK_COMPLETION, priority=priority
        )

    def add_error(self, error: str, *, priority: MessagePriority | None = None) -> LabeledMessage:
        """Append an error note."""
        return self._append("assistant", [TextBlock(text=error)], MessageLabel.ERROR, priority=priority)

    def add_system_context(
        self, text: str, *, priority: MessagePriority | None = None
    ) -> LabeledMessage:
        """Append background context the model must always see."""
        return self._append("user", text, MessageLabel.SYSTEM_CONTEXT, priority=priority)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_all(self) -> list[LabeledMessage]:
        """Return a copy of the message list in insertion order."""
        return list(self._messages)

    def get_by_id(self, message_id: str) -> LabeledMessage | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def get_by_label(self, label: MessageLabel | str) -> list[LabeledMessage]:
        wanted = MessageLabel(label)
        return [message for message in self._messages if message.metadata.label == wanted]

    def filter(self, options: HistoryFilter | None = None) -> list[LabeledMessage]:
        """Return the messages matching ``options`` in insertion order.

        ``options.limit`` is applied after every other predicate.
        """
        options = options or HistoryFilter()
        matched = [message for message in self._messages if options.matches(message)]
        if options.limit is not None:
            matched = matched[: options.limit]
        return matched

    def to_base_messages(self) -> list[BaseMessage]:
        """Project to the ``{role, content}`` shape the LLM call consumes."""
        return [message.to_base_message() for message in self._messages]

    def token_count(self) -> int:
        """Return the summed token estimate of every message."""
        return sum(message.metadata.token_count for message in self._messages)

    # ------------------------------------------------------------------
    # Summarization
    # ------------------------------------------------------------------

    def summarize(self, options: SummaryOptions | None = None) -> list[LabeledMessage]:
        """Select a bounded, chronologically ordered subset of the history.

        Preserved messages (matching ``preserve_labels`` or
        ``preserve_priorities``) are always included.  Remaining candidates
        are walked newest-first: the walk stops once the result holds
        ``max_messages`` entries, while a candidate that would push the
        token total over ``max_tokens`` is skipped and the walk continues.

        Parameters
        ----------
        options:
            Budget and preservation rules.  Defaults to ``SummaryOptions()``.

        Returns
        -------
        list[LabeledMessage]
            Selected messages sorted by timestamp, ties kept in log order.
        """
        options = options or SummaryOptions()
        position = {id(message): index for index, message in enumerate(self._messages)}

        preserved = [m for m in self._messages if options.preserves(m)]
        candidates = [m for m in self._messages if not options.preserves(m)]

        result = list(preserved)
        tokens = sum(m.metadata.token_count for m in preserved)

        for message in reversed(candidates):
            if options.max_messages is not None and len(result) >= options.max_messages:
                break
            cost = message.metadata.token_count
            if options.max_tokens is not None and tokens + cost > options.max_tokens:
                continue
            result.append(message)
            tokens += cost

        result.sort(key=lambda m: (m.metadata.timestamp, position[id(m)]))
        logger.debug(
            "LabeledHistory: summarized %d messages to %d (%d tokens)",
            len(self._messages),
            len(result),
            tokens,
        )
        return result

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def update_priority(self, message_id: str, priority: MessagePriority | str) -> None:
        message = self.get_by_id(message_id)
        if message is not None:
            message.metadata.priority = MessagePriority(priority)

    def add_tag(self, message_id: str, tag: str) -> None:
        message = self.get_by_id(message_id)
        if message is not None and tag not in message.metadata.tags:
            message.metadata.tags.append(tag)

    def remove_tag(self, message_id: str, tag: str) -> None:
        message = self.get_by_id(message_id)
        if message is not None:
            message.metadata.tags = [t for t in message.metadata.tags if t != tag]

    def remove(self, message_id: str) -> None:
        self._messages = [m for m in self._messages if m.id != message_id]

    def clear(self) -> None:
        self._messages.clear()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_list(self) -> list[dict[str, object]]:
        """Return the messages as JSON-compatible dicts."""
        return [message.model_dump(mode="json") for message in self._messages]

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialise the full message list, metadata included, as a JSON array."""
        return json.dumps(self.to_list(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_list(cls, data: Sequence[object]) -> LabeledHistory:
        """Rebuild a history from dicts produced by ``to_list``.

        Raises
        ------
        pydantic.ValidationError
            If any entry does not describe a valid ``LabeledMessage``.
        """
        return cls(_MESSAGE_LIST.validate_python(list(data)))

    @classmethod
    def from_json(cls, raw: str) -> LabeledHistory:
        """Rebuild a history from a JSON array produced by ``to_json``.

        Raises
        ------
        ValueError
            If the document is not a JSON array.
        pydantic.ValidationError
            If any entry does not describe a valid ``LabeledMessage``.
        """
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"History JSON must be an array, got {type(data).__name__}.")
        return cls.from_list(data)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[LabeledMessage]:
        return iter(list(self._messages))

    def __repr__(self) -> str:
        return f"LabeledHistory(messages={len(self._messages)}, tokens={self.token_count()})"
