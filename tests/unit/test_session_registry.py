"""Unit tests for agent_session_context.session.registry and session.state."""
from __future__ import annotations

from uuid import UUID

import pytest

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.session.registry import (
    IllegalTransitionError,
    SessionNotFoundError,
    SessionRegistry,
)
from agent_session_context.session.state import SessionStatus, TaskSession


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> SessionRegistry:
    return SessionRegistry()


def _active_count(registry: SessionRegistry) -> int:
    return sum(1 for s in registry.all_sessions() if s.status is SessionStatus.ACTIVE)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_not_found_is_key_error(self) -> None:
        err = SessionNotFoundError("codegen-1")
        assert isinstance(err, KeyError)
        assert err.session_id == "codegen-1"
        assert "codegen-1" in str(err)

    def test_illegal_transition_is_value_error(self) -> None:
        err = IllegalTransitionError("s1", "resume", SessionStatus.ACTIVE)
        assert isinstance(err, ValueError)
        assert err.session_id == "s1"
        assert err.action == "resume"
        assert err.status is SessionStatus.ACTIVE
        assert "active" in str(err)

    def test_illegal_transition_without_session(self) -> None:
        err = IllegalTransitionError(None, "complete")
        assert "no active session" in str(err)


# ---------------------------------------------------------------------------
# start_session
# ---------------------------------------------------------------------------


class TestStartSession:
    def test_returns_active_session(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        assert isinstance(session, TaskSession)
        assert session.status is SessionStatus.ACTIVE
        assert registry.active_session() is session

    def test_id_prefixed_with_task_type(self, registry: SessionRegistry) -> None:
        assert registry.start_session("codegen").id.startswith("codegen-")

    def test_id_suffix_is_full_uuid(self, registry: SessionRegistry) -> None:
        suffix = registry.start_session("codegen").id.removeprefix("codegen-")
        assert UUID(hex=suffix).hex == suffix
        assert len(suffix) == 32

    def test_ids_are_unique(self, registry: SessionRegistry) -> None:
        ids = {registry.start_session("mulmo").id for _ in range(20)}
        assert len(ids) == 20

    def test_default_state_is_empty_dict(self, registry: SessionRegistry) -> None:
        assert registry.start_session("mulmo").state == {}

    def test_initial_state_kept(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo", {"step": 1})
        assert session.state == {"step": 1}

    def test_fresh_empty_history(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        history = registry.history_for(session.id)
        assert isinstance(history, LabeledHistory)
        assert len(history) == 0
        assert registry.active_history() is history

    def test_suspends_previous_active(self, registry: SessionRegistry) -> None:
        first = registry.start_session("mulmo")
        second = registry.start_session("codegen")
        assert first.status is SessionStatus.SUSPENDED
        assert registry.active_session() is second
        assert _active_count(registry) == 1

    def test_histories_are_distinct(self, registry: SessionRegistry) -> None:
        a = registry.start_session("mulmo")
        b = registry.start_session("codegen")
        assert registry.history_for(a.id) is not registry.history_for(b.id)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_suspend(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        assert session.status is SessionStatus.SUSPENDED
        assert registry.active_session() is None
        assert registry.active_history() is None

    def test_suspend_unknown_raises_not_found(self, registry: SessionRegistry) -> None:
        with pytest.raises(SessionNotFoundError):
            registry.suspend_session("ghost")

    def test_suspend_twice_raises(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        with pytest.raises(IllegalTransitionError) as excinfo:
            registry.suspend_session(session.id)
        assert excinfo.value.status is SessionStatus.SUSPENDED

    def test_resume_swaps_active(self, registry: SessionRegistry) -> None:
        first = registry.start_session("mulmo")
        second = registry.start_session("codegen")
        resumed = registry.resume_session(first.id)
        assert resumed is first
        assert first.status is SessionStatus.ACTIVE
        assert second.status is SessionStatus.SUSPENDED
        assert _active_count(registry) == 1

    def test_resume_bumps_updated_at(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        before = session.updated_at
        registry.resume_session(session.id)
        assert session.updated_at >= before

    def test_resume_active_raises(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        with pytest.raises(IllegalTransitionError):
            registry.resume_session(session.id)

    def test_resume_completed_raises(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.complete_session(session.id)
        with pytest.raises(IllegalTransitionError):
            registry.resume_session(session.id)

    def test_resume_unknown_checked_before_status(self, registry: SessionRegistry) -> None:
        with pytest.raises(SessionNotFoundError):
            registry.resume_session("ghost")

    def test_complete_default_summary(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        history = registry.history_for(session.id)
        assert history is not None
        history.add_user_message("one")
        history.add_user_message("two")
        summary = registry.complete_session(session.id)
        assert summary == "[mulmo] 2 messages"
        assert session.summary == summary
        assert session.status is SessionStatus.COMPLETED
        assert registry.active_session() is None

    def test_complete_explicit_summary(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        assert registry.complete_session(session.id, "made a video") == "made a video"

    def test_complete_suspended_raises(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        with pytest.raises(IllegalTransitionError):
            registry.complete_session(session.id)

    def test_discard_active(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.discard_session(session.id)
        assert session.status is SessionStatus.DISCARDED
        assert registry.active_session() is None

    def test_discard_suspended(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        registry.discard_session(session.id)
        assert session.status is SessionStatus.DISCARDED

    def test_discard_completed_raises(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.complete_session(session.id)
        with pytest.raises(IllegalTransitionError):
            registry.discard_session(session.id)

    def test_update_state(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.update_session_state(session.id, {"phase": "writing"})
        assert session.state == {"phase": "writing"}

    def test_update_state_requires_active(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.suspend_session(session.id)
        with pytest.raises(IllegalTransitionError):
            registry.update_session_state(session.id, {})


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_unknown_lookups_return_none(self, registry: SessionRegistry) -> None:
        assert registry.get_session("ghost") is None
        assert registry.history_for("ghost") is None
        assert not registry.has_session("ghost")

    def test_suspended_sessions(self, registry: SessionRegistry) -> None:
        a = registry.start_session("mulmo")
        b = registry.start_session("codegen")
        registry.start_session("document")
        assert {s.id for s in registry.suspended_sessions()} == {a.id, b.id}

    def test_pending_count(self, registry: SessionRegistry) -> None:
        a = registry.start_session("mulmo")
        registry.start_session("codegen")
        registry.discard_session(a.id)
        assert registry.pending_count() == 1
        assert len(registry) == 2

    def test_sessions_survive_completion(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.complete_session(session.id)
        assert registry.get_session(session.id) is session
        assert registry.history_for(session.id) is not None

    def test_reset_forgets_everything(self, registry: SessionRegistry) -> None:
        session = registry.start_session("mulmo")
        registry.reset()
        assert registry.all_sessions() == []
        assert registry.active_session() is None
        assert registry.history_for(session.id) is None
