"""Unit tests for agent_session_context.history.labeled_history."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.history.message import (
    HistoryFilter,
    LabeledMessage,
    MessageLabel,
    MessagePriority,
    SummaryOptions,
    estimate_tokens,
)
from agent_session_context.llm.types import TextBlock, ToolResult, ToolUse, ToolUseBlock


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def history() -> LabeledHistory:
    return LabeledHistory()


@pytest.fixture()
def mixed_history() -> LabeledHistory:
    history = LabeledHistory()
    history.add_system_context("You are helping with a video script.")
    history.add_user_message("Make a video about cats", tags=["request"])
    history.add_assistant_message([TextBlock(text="Sure, planning now.")])
    history.add_tool_call(
        "read_file",
        "tool_1",
        [ToolUseBlock(tool_use=ToolUse(id="tool_1", name="read_file", input={"path": "a.txt"}))],
    )
    history.add_tool_result("read_file", "tool_1", "cats are great")
    history.add_task_completion("Script written.")
    history.add_error("Renderer unavailable.")
    return history


def _medium(history: LabeledHistory, text: str) -> LabeledMessage:
    return history.add_user_message(text, priority=MessagePriority.MEDIUM)


# ---------------------------------------------------------------------------
# Add operations
# ---------------------------------------------------------------------------


class TestAddOperations:
    def test_user_message_defaults(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi")
        assert message.role == "user"
        assert message.content == "hi"
        assert message.label is MessageLabel.USER_INPUT
        assert message.priority is MessagePriority.HIGH
        assert message.id.startswith("msg_")
        assert message.timestamp.tzinfo is not None

    def test_token_estimate_on_strings(self, history: LabeledHistory) -> None:
        assert history.add_user_message("a" * 9).metadata.token_count == 3
        assert estimate_tokens("") == 0

    def test_explicit_priority_wins(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi", priority=MessagePriority.LOW)
        assert message.priority is MessagePriority.LOW

    def test_default_priorities_per_label(self, mixed_history: LabeledHistory) -> None:
        priorities = {m.label: m.priority for m in mixed_history}
        assert priorities[MessageLabel.SYSTEM_CONTEXT] is MessagePriority.CRITICAL
        assert priorities[MessageLabel.ASSISTANT_RESPONSE] is MessagePriority.MEDIUM
        assert priorities[MessageLabel.TOOL_CALL] is MessagePriority.MEDIUM
        assert priorities[MessageLabel.TOOL_RESULT] is MessagePriority.MEDIUM
        assert priorities[MessageLabel.TASK_COMPLETION] is MessagePriority.HIGH
        assert priorities[MessageLabel.ERROR] is MessagePriority.HIGH

    def test_tool_result_shape(self, history: LabeledHistory) -> None:
        message = history.add_tool_result("calculator", "tool_9", "8")
        assert message.role == "user"
        assert message.content == [ToolResult(tool_use_id="tool_9", content="8")]
        assert message.metadata.tool_name == "calculator"
        assert message.metadata.tool_use_id == "tool_9"

    def test_completion_and_error_are_text_blocks(self, history: LabeledHistory) -> None:
        done = history.add_task_completion("done")
        failed = history.add_error("boom")
        assert done.role == "assistant" and done.content == [TextBlock(text="done")]
        assert failed.content == [TextBlock(text="boom")]

    def test_duplicate_tags_collapsed(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi", tags=["a", "b", "a"])
        assert message.metadata.tags == ["a", "b"]

    def test_ids_unique(self, history: LabeledHistory) -> None:
        ids = {history.add_user_message(str(i)).id for i in range(50)}
        assert len(ids) == 50


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


class TestReadOperations:
    def test_get_all_is_copy(self, mixed_history: LabeledHistory) -> None:
        snapshot = mixed_history.get_all()
        snapshot.clear()
        assert len(mixed_history) == 7

    def test_get_by_id(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi")
        assert history.get_by_id(message.id) is message
        assert history.get_by_id("msg_missing") is None

    def test_get_by_label_accepts_string(self, mixed_history: LabeledHistory) -> None:
        assert len(mixed_history.get_by_label("tool_result")) == 1

    def test_to_base_messages_drops_metadata(self, mixed_history: LabeledHistory) -> None:
        base = mixed_history.to_base_messages()
        assert len(base) == 7
        assert base[1].role == "user"
        assert base[1].content == "Make a video about cats"
        assert not hasattr(base[1], "metadata")

    def test_token_count_sums(self, history: LabeledHistory) -> None:
        history.add_user_message("a" * 8)
        history.add_user_message("a" * 4)
        assert history.token_count() == 3

    def test_iteration_order(self, mixed_history: LabeledHistory) -> None:
        labels = [m.label for m in mixed_history]
        assert labels[0] is MessageLabel.SYSTEM_CONTEXT
        assert labels[-1] is MessageLabel.ERROR


# ---------------------------------------------------------------------------
# filter
# ---------------------------------------------------------------------------


class TestFilter:
    def test_no_options_returns_everything(self, mixed_history: LabeledHistory) -> None:
        assert len(mixed_history.filter()) == 7

    def test_labels(self, mixed_history: LabeledHistory) -> None:
        found = mixed_history.filter(HistoryFilter(labels=frozenset({"tool_call", "tool_result"})))
        assert [m.label for m in found] == [MessageLabel.TOOL_CALL, MessageLabel.TOOL_RESULT]

    def test_priorities(self, mixed_history: LabeledHistory) -> None:
        found = mixed_history.filter(HistoryFilter(priorities=frozenset({MessagePriority.CRITICAL})))
        assert len(found) == 1

    def test_tags_match_any(self, history: LabeledHistory) -> None:
        history.add_user_message("a", tags=["x"])
        history.add_user_message("b", tags=["y"])
        history.add_user_message("c")
        found = history.filter(HistoryFilter(tags=frozenset({"x", "y"})))
        assert [m.content for m in found] == ["a", "b"]

    def test_time_bounds_inclusive(self, history: LabeledHistory) -> None:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for offset in range(3):
            history.add_user_message(str(offset)).metadata.timestamp = base + timedelta(
                minutes=offset
            )
        found = history.filter(
            HistoryFilter(after=base + timedelta(minutes=1), before=base + timedelta(minutes=2))
        )
        assert [m.content for m in found] == ["1", "2"]

    def test_exclude_ids(self, history: LabeledHistory) -> None:
        skipped = history.add_user_message("skip")
        history.add_user_message("keep")
        found = history.filter(HistoryFilter(exclude_ids=frozenset({skipped.id})))
        assert [m.content for m in found] == ["keep"]

    def test_limit_applied_last(self, mixed_history: LabeledHistory) -> None:
        found = mixed_history.filter(
            HistoryFilter(priorities=frozenset({MessagePriority.MEDIUM}), limit=2)
        )
        assert [m.label for m in found] == [MessageLabel.ASSISTANT_RESPONSE, MessageLabel.TOOL_CALL]

    def test_limit_zero_is_empty(self, mixed_history: LabeledHistory) -> None:
        assert mixed_history.filter(HistoryFilter(limit=0)) == []

    def test_negative_limit_rejected(self) -> None:
        with pytest.raises(ValueError):
            HistoryFilter(limit=-1)


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_no_limits_keeps_everything(self, mixed_history: LabeledHistory) -> None:
        assert mixed_history.summarize() == mixed_history.get_all()

    def test_preserved_plus_newest_candidate(self, history: LabeledHistory) -> None:
        high_a = history.add_user_message("high a")
        _medium(history, "medium 1")
        high_b = history.add_user_message("high b")
        _medium(history, "medium 2")
        newest = _medium(history, "medium 3")
        result = history.summarize(SummaryOptions(max_messages=3))
        assert result == [high_a, high_b, newest]

    def test_preserved_exceed_max_messages(self, history: LabeledHistory) -> None:
        for i in range(4):
            history.add_user_message(f"high {i}")
        _medium(history, "medium")
        result = history.summarize(SummaryOptions(max_messages=2))
        assert len(result) == 4
        assert all(m.priority is MessagePriority.HIGH for m in result)

    def test_token_budget_skips_and_continues(self, history: LabeledHistory) -> None:
        older = _medium(history, "a" * 40)
        middle = _medium(history, "b" * 40)
        _medium(history, "c" * 160)
        result = history.summarize(SummaryOptions(max_tokens=25))
        assert result == [older, middle]

    def test_message_cap_stops_walk(self, history: LabeledHistory) -> None:
        _medium(history, "a" * 40)
        _medium(history, "b" * 40)
        newest = _medium(history, "c" * 160)
        assert history.summarize(SummaryOptions(max_messages=1)) == [newest]

    def test_skip_then_stop(self, history: LabeledHistory) -> None:
        _medium(history, "a" * 40)
        middle = _medium(history, "b" * 40)
        _medium(history, "c" * 160)
        result = history.summarize(SummaryOptions(max_messages=1, max_tokens=25))
        assert result == [middle]

    def test_preserved_tokens_count_against_budget(self, history: LabeledHistory) -> None:
        kept = history.add_user_message("h" * 80)
        _medium(history, "m" * 8)
        assert history.summarize(SummaryOptions(max_tokens=20)) == [kept]

    def test_preserve_labels(self, history: LabeledHistory) -> None:
        result_message = history.add_tool_result("read_file", "t1", "contents")
        _medium(history, "newer")
        result = history.summarize(
            SummaryOptions(max_messages=1, preserve_labels=frozenset({"tool_result"}))
        )
        assert result == [result_message]

    def test_custom_preserve_priorities(self, history: LabeledHistory) -> None:
        history.add_user_message("high")
        low = history.add_user_message("low", priority=MessagePriority.LOW)
        result = history.summarize(
            SummaryOptions(max_messages=1, preserve_priorities=frozenset({MessagePriority.LOW}))
        )
        assert result == [low]

    def test_result_chronological(self, history: LabeledHistory) -> None:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        first = _medium(history, "first")
        second = history.add_user_message("second")
        first.metadata.timestamp = base
        second.metadata.timestamp = base + timedelta(seconds=1)
        assert history.summarize() == [first, second]

    def test_does_not_mutate_history(self, mixed_history: LabeledHistory) -> None:
        mixed_history.summarize(SummaryOptions(max_messages=1))
        assert len(mixed_history) == 7

    @pytest.mark.parametrize("field_name", ["max_messages", "max_tokens"])
    def test_zero_budget_rejected(self, field_name: str) -> None:
        with pytest.raises(ValueError):
            SummaryOptions(**{field_name: 0})


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


class TestMutators:
    def test_update_priority(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi")
        history.update_priority(message.id, "low")
        assert message.priority is MessagePriority.LOW

    def test_tags(self, history: LabeledHistory) -> None:
        message = history.add_user_message("hi")
        history.add_tag(message.id, "x")
        history.add_tag(message.id, "x")
        assert message.metadata.tags == ["x"]
        history.remove_tag(message.id, "x")
        assert message.metadata.tags == []

    def test_unknown_id_is_noop(self, history: LabeledHistory) -> None:
        history.add_user_message("hi")
        history.update_priority("ghost", MessagePriority.LOW)
        history.add_tag("ghost", "x")
        history.remove_tag("ghost", "x")
        history.remove("ghost")
        assert len(history) == 1

    def test_remove_and_clear(self, history: LabeledHistory) -> None:
        message = history.add_user_message("a")
        history.add_user_message("b")
        history.remove(message.id)
        assert [m.content for m in history] == ["b"]
        history.clear()
        assert len(history) == 0


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestJson:
    def test_round_trip_preserves_everything(self, mixed_history: LabeledHistory) -> None:
        restored = LabeledHistory.from_json(mixed_history.to_json())
        assert restored.get_all() == mixed_history.get_all()

    def test_metadata_in_snake_case(self, history: LabeledHistory) -> None:
        history.add_tool_result("calculator", "t1", "8")
        entry = json.loads(history.to_json())[0]
        assert entry["metadata"]["tool_use_id"] == "t1"
        assert entry["metadata"]["label"] == "tool_result"
        assert entry["content"] == [{"tool_use_id": "t1", "content": "8"}]

    def test_non_array_rejected(self) -> None:
        with pytest.raises(ValueError):
            LabeledHistory.from_json('{"role": "user"}')

    def test_invalid_entry_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LabeledHistory.from_json('[{"role": "robot", "content": "x"}]')

    def test_repr(self, history: LabeledHistory) -> None:
        history.add_user_message("a" * 4)
        assert repr(history) == "LabeledHistory(messages=1, tokens=1)"
