"""Unit tests for agent_session_context.context.agent_context."""
from __future__ import annotations

import pytest

from agent_session_context.context.agent_context import AgentContext, ContextConfig
from agent_session_context.history.message import MessageLabel
from agent_session_context.llm.types import TextBlock, ToolSchema
from agent_session_context.modes.profiles import AgentMode, get_mode_profile
from agent_session_context.session.registry import IllegalTransitionError, SessionNotFoundError
from agent_session_context.session.state import SessionStatus
from agent_session_context.tasks.config import TaskConfigTable
from agent_session_context.tasks.phases import TaskSessionState


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def context() -> AgentContext:
    return AgentContext(TaskConfigTable.default())


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self, context: AgentContext) -> None:
        assert context.mode() is AgentMode.CONVERSATION
        assert context.active_session() is None
        assert context.current_history() is context.base_history
        assert not context.in_turn

    def test_custom_initial_mode(self) -> None:
        context = AgentContext(config=ContextConfig(initial_mode="review"))
        assert context.mode() is AgentMode.REVIEW

    def test_bad_config_rejected(self) -> None:
        with pytest.raises(ValueError, match="initial_mode"):
            ContextConfig(initial_mode="dreaming")  # type: ignore[arg-type]

    def test_default_table_when_none(self) -> None:
        assert AgentContext().task_table.has_task("mulmo")


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


class TestModes:
    def test_push_and_pop(self, context: AgentContext) -> None:
        context.push_mode(AgentMode.EXPLORATION)
        assert context.mode() is AgentMode.EXPLORATION
        assert not context.can_write_files()
        assert context.max_iterations() == 50
        context.pop_mode()
        assert context.mode() is AgentMode.CONVERSATION

    def test_pop_at_base_keeps_mode(self, context: AgentContext) -> None:
        assert context.pop_mode() is None
        assert context.mode() is AgentMode.CONVERSATION

    def test_mode_stack_snapshot(self, context: AgentContext) -> None:
        context.push_mode("planning")
        assert [e.mode for e in context.mode_stack()] == [
            AgentMode.CONVERSATION,
            AgentMode.PLANNING,
        ]


# ---------------------------------------------------------------------------
# Tool and prompt resolution
# ---------------------------------------------------------------------------


class TestResolution:
    def test_mode_tools_without_session(self, context: AgentContext) -> None:
        expected = list(get_mode_profile(AgentMode.CONVERSATION).enabled_tools)
        assert context.enabled_tool_names() == expected

    def test_task_tools_with_session(self, context: AgentContext) -> None:
        context.start_session("analysis")
        assert context.enabled_tool_names()[:2] == ["read_file", "list_files"]
        assert context.is_tool_enabled("complete_session")
        assert not context.is_tool_enabled("write_file")

    def test_phase_tools(self, context: AgentContext) -> None:
        context.start_session("mulmo", initial_state={"current_phase": "writing"})
        names = context.enabled_tool_names()
        assert names[:2] == ["read_file", "createBeatsOnMulmoScript"]
        assert "validate_mulmo" not in names

    def test_unknown_task_falls_back_to_mode(self, context: AgentContext) -> None:
        context.start_session("painting")
        assert context.mode() is AgentMode.IMPLEMENTATION
        expected = list(get_mode_profile(AgentMode.IMPLEMENTATION).enabled_tools)
        assert context.enabled_tool_names() == expected
        assert context.system_prompt() == get_mode_profile(AgentMode.IMPLEMENTATION).system_prompt

    def test_enabled_tools_filters_schemas(self, context: AgentContext) -> None:
        context.start_session("analysis")
        schemas = [ToolSchema(name=n) for n in ("write_file", "list_files", "read_file")]
        assert [s.name for s in context.enabled_tools(schemas)] == ["list_files", "read_file"]

    def test_system_prompt_prefers_task(self, context: AgentContext) -> None:
        assert context.system_prompt() == get_mode_profile(AgentMode.CONVERSATION).system_prompt
        context.start_session("codegen", initial_state=TaskSessionState(current_phase="testing"))
        assert "## Current phase: testing" in context.system_prompt()


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


class TestSessionLifecycle:
    def test_start_pushes_tagged_frame(self, context: AgentContext) -> None:
        session = context.start_session("document")
        assert context.mode() is AgentMode.PLANNING
        assert context.mode_stack()[-1].session_id == session.id
        assert context.current_history() is context.session_history(session.id)

    def test_explicit_mode(self, context: AgentContext) -> None:
        context.start_session("document", mode=AgentMode.REVIEW)
        assert context.mode() is AgentMode.REVIEW

    def test_suspend_returns_to_base(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.push_mode(AgentMode.REVIEW)
        suspended = context.suspend_current_session()
        assert suspended is session
        assert session.status is SessionStatus.SUSPENDED
        assert context.mode_stack()[-1].session_id is None
        assert len(context.mode_stack()) == 1
        assert context.current_history() is context.base_history

    def test_suspend_without_session(self, context: AgentContext) -> None:
        with pytest.raises(IllegalTransitionError):
            context.suspend_current_session()

    def test_resume_pushes_frame_when_missing(self, context: AgentContext) -> None:
        session = context.start_session("analysis")
        context.suspend_current_session()
        context.resume_session(session.id)
        assert context.mode() is AgentMode.EXPLORATION
        assert context.mode_stack()[-1].session_id == session.id

    def test_resume_replaces_active_session_frame(self, context: AgentContext) -> None:
        first = context.start_session("mulmo")
        context.start_session("codegen", mode=AgentMode.REVIEW)
        assert first.status is SessionStatus.SUSPENDED
        context.resume_session(first.id)
        assert [(e.mode, e.session_id) for e in context.mode_stack()] == [
            (AgentMode.CONVERSATION, None),
            (AgentMode.IMPLEMENTATION, first.id),
        ]

    def test_resume_pops_to_existing_frame(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.suspend_current_session()
        context.push_mode(AgentMode.PLANNING, session.id)
        context.push_mode(AgentMode.REVIEW)
        context.resume_session(session.id)
        assert context.mode() is AgentMode.PLANNING
        assert context.mode_stack()[-1].session_id == session.id
        assert len(context.mode_stack()) == 2

    def test_start_pops_previous_session_frame(self, context: AgentContext) -> None:
        first = context.start_session("mulmo", mode=AgentMode.PLANNING)
        second = context.start_session("codegen", mode=AgentMode.REVIEW)
        assert [(e.mode, e.session_id) for e in context.mode_stack()] == [
            (AgentMode.CONVERSATION, None),
            (AgentMode.REVIEW, second.id),
        ]
        assert not any(e.session_id == first.id for e in context.mode_stack())

    def test_resume_unknown(self, context: AgentContext) -> None:
        with pytest.raises(SessionNotFoundError):
            context.resume_session("ghost")

    def test_complete_records_summary_in_base(self, context: AgentContext) -> None:
        session = context.start_session("codegen")
        for text in ("one", "two", "three", "four"):
            context.add_user_message(text)
        summary = context.complete_current_session()
        assert summary == "[codegen] 4 messages"
        completions = context.base_history.get_by_label(MessageLabel.TASK_COMPLETION)
        assert len(completions) == 1
        assert completions[0].content == [TextBlock(text=f"[Session {session.id}] {summary}")]
        assert len(context.base_history) == 1
        assert len(context.mode_stack()) == 1

    def test_complete_without_session(self, context: AgentContext) -> None:
        with pytest.raises(IllegalTransitionError):
            context.complete_current_session()

    def test_discard_pops_frames(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.discard_session(session.id)
        assert session.status is SessionStatus.DISCARDED
        assert len(context.mode_stack()) == 1
        assert len(context.base_history) == 0

    def test_discard_suspended_without_frame(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.suspend_current_session()
        context.push_mode(AgentMode.REVIEW)
        context.discard_session(session.id)
        assert context.mode() is AgentMode.REVIEW

    def test_discard_suspended_keeps_active_session_mode(self, context: AgentContext) -> None:
        first = context.start_session("mulmo", mode=AgentMode.PLANNING)
        second = context.start_session("codegen", mode=AgentMode.REVIEW)
        context.discard_session(first.id)
        assert first.status is SessionStatus.DISCARDED
        assert context.active_session() is second
        assert context.mode() is AgentMode.REVIEW
        assert context.max_iterations() == 20
        assert context.mode_stack()[-1].session_id == second.id

    def test_discard_removes_only_tagged_frames(self, context: AgentContext) -> None:
        first = context.start_session("mulmo")
        context.suspend_current_session()
        context.push_mode(AgentMode.PLANNING, first.id)
        second = context.start_session("codegen", mode=AgentMode.REVIEW)
        context.push_mode(AgentMode.EXPLORATION, first.id)
        context.discard_session(first.id)
        assert [(e.mode, e.session_id) for e in context.mode_stack()] == [
            (AgentMode.CONVERSATION, None),
            (AgentMode.REVIEW, second.id),
        ]

    def test_update_state(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.update_session_state({"current_phase": "validation"})
        assert session.state == {"current_phase": "validation"}

    def test_update_state_without_session(self, context: AgentContext) -> None:
        with pytest.raises(IllegalTransitionError):
            context.update_session_state({})


# ---------------------------------------------------------------------------
# History routing and turn locking
# ---------------------------------------------------------------------------


class TestHistoryRouting:
    def test_sessions_are_isolated(self, context: AgentContext) -> None:
        context.add_user_message("chat before tasks")
        mulmo = context.start_session("mulmo")
        context.add_user_message("make a video")
        codegen = context.start_session("codegen")
        context.add_user_message("write a parser")
        context.add_user_message("with tests")

        mulmo_history = context.session_history(mulmo.id)
        codegen_history = context.session_history(codegen.id)
        assert mulmo_history is not None and codegen_history is not None
        assert [m.content for m in mulmo_history] == ["make a video"]
        assert [m.content for m in codegen_history] == ["write a parser", "with tests"]
        assert [m.content for m in context.base_history] == ["chat before tasks"]

    def test_resumed_session_sees_only_its_own_messages(self, context: AgentContext) -> None:
        mulmo = context.start_session("mulmo")
        context.add_user_message("script it")
        context.suspend_current_session()
        context.start_session("codegen")
        context.add_user_message("write a tokenizer")
        context.resume_session(mulmo.id)
        assert [m.content for m in context.current_history()] == ["script it"]

    def test_turn_lock_survives_switch_until_next_turn(self, context: AgentContext) -> None:
        first = context.start_session("mulmo")
        first_history = context.session_history(first.id)
        context.begin_turn()
        context.suspend_current_session()
        second = context.start_session("codegen")
        assert context.current_history() is first_history
        context.end_turn()

        context.begin_turn()
        assert context.current_history() is context.session_history(second.id)
        context.end_turn()

    def test_turn_lock_keeps_starting_history(self, context: AgentContext) -> None:
        context.begin_turn()
        assert context.in_turn
        context.add_user_message("please start a document")
        session = context.start_session("document")
        context.add_assistant_message([TextBlock(text="Started.")])
        context.end_turn()

        assert len(context.base_history) == 2
        session_history = context.session_history(session.id)
        assert session_history is not None and len(session_history) == 0

        context.add_user_message("next turn")
        assert [m.content for m in session_history] == ["next turn"]

    def test_turn_lock_on_session_survives_suspend(self, context: AgentContext) -> None:
        session = context.start_session("mulmo")
        context.begin_turn()
        context.suspend_current_session()
        context.add_assistant_message([TextBlock(text="Suspended.")])
        context.end_turn()
        session_history = context.session_history(session.id)
        assert session_history is not None and len(session_history) == 1
        assert len(context.base_history) == 0
        assert context.current_history() is context.base_history

    def test_messages_and_base_messages(self, context: AgentContext) -> None:
        context.add_user_message("hi")
        context.add_tool_result("calculator", "t1", "8")
        assert len(context.messages()) == 2
        assert [m.role for m in context.to_base_messages()] == ["user", "user"]

    def test_error_and_completion_delegates(self, context: AgentContext) -> None:
        context.add_error("boom")
        context.add_task_completion("done")
        labels = [m.label for m in context.messages()]
        assert labels == [MessageLabel.ERROR, MessageLabel.TASK_COMPLETION]


# ---------------------------------------------------------------------------
# Status and reset
# ---------------------------------------------------------------------------


class TestStatus:
    def test_status_snapshot(self, context: AgentContext) -> None:
        first = context.start_session("mulmo", initial_state={"current_phase": "planning"})
        second = context.start_session("codegen")
        status = context.status()
        assert status.current_mode is AgentMode.IMPLEMENTATION
        assert status.mode_stack_depth == 2
        assert status.active_task is not None and status.active_task.id == second.id
        assert [t.id for t in status.suspended_tasks] == [first.id]
        assert status.suspended_tasks[0].current_phase == "planning"
        assert not status.in_turn

    def test_status_reports_turn(self, context: AgentContext) -> None:
        context.begin_turn()
        assert context.status().in_turn
        context.end_turn()
        assert not context.status().in_turn

    def test_reset(self, context: AgentContext) -> None:
        context.add_user_message("hi")
        session = context.start_session("mulmo")
        context.begin_turn()
        context.reset()
        status = context.status()
        assert status.current_mode is AgentMode.CONVERSATION
        assert status.mode_stack_depth == 1
        assert status.active_task is None
        assert status.suspended_tasks == ()
        assert not status.in_turn
        assert len(context.base_history) == 0
        assert context.session_history(session.id) is None
