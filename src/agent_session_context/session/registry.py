"""Task session registry.

Provides ``SessionRegistry``, which owns every task session created in the
process together with the one ``LabeledHistory`` belonging to each, and
enforces that at most one session is active at a time.

Classes
-------
- SessionNotFoundError    — unknown session id
- IllegalTransitionError  — lifecycle transition from the wrong status
- SessionRegistry         — in-memory session store with lifecycle rules
"""
from __future__ import annotations

import logging
from typing import Any

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.session.state import SessionStatus, TaskSession, new_session_id

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a requested session is not in the registry."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} not found.")


class IllegalTransitionError(ValueError):
    """Raised when a lifecycle operation is not allowed from the current status.

    Parameters
    ----------
    session_id:
        The session the operation targeted, or None when no session was
        active at all.
    action:
        The attempted operation, e.g. ``"suspend"``.
    status:
        The session's status at the time, or None when there is no session.
    """

    def __init__(
        self,
        session_id: str | None,
        action: str,
        status: SessionStatus | None = None,
    ) -> None:
        self.session_id = session_id
        self.action = action
        self.status = status
        if session_id is None:
            message = f"Cannot {action}: no active session."
        else:
            state = status.value if status is not None else "unknown"
            message = f"Cannot {action} session {session_id!r} with status {state!r}."
        super().__init__(message)


class SessionRegistry:
    """Create and transition task sessions.

    Sessions are never physically removed; completed and discarded sessions
    remain queryable until ``reset`` is called.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, TaskSession] = {}
        self._histories: dict[str, LabeledHistory] = {}
        self._active_id: str | None = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(
        self, session_id: str, action: str, allowed: tuple[SessionStatus, ...]
    ) -> TaskSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.status not in allowed:
            raise IllegalTransitionError(session_id, action, session.status)
        return session

    def _transition(self, session: TaskSession, status: SessionStatus) -> None:
        logger.debug(
            "SessionRegistry: %s %s -> %s", session.id, session.status.value, status.value
        )
        session.status = status
        session.touch()
        if status is not SessionStatus.ACTIVE and self._active_id == session.id:
            self._active_id = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self, task_type: str, initial_state: Any = None) -> TaskSession:
        """Create a new active session with an empty history.

        Any currently active session is suspended first.

        Parameters
        ----------
        task_type:
            Task configuration name; also the id prefix.
        initial_state:
            Task payload.  Defaults to an empty dict.

        Returns
        -------
        TaskSession
            The new active session.
        """
        if self._active_id is not None:
            self.suspend_session(self._active_id)

        session = TaskSession(
            id=new_session_id(task_type),
            task_type=task_type,
            state={} if initial_state is None else initial_state,
        )
        self._sessions[session.id] = session
        self._histories[session.id] = LabeledHistory()
        self._active_id = session.id
        logger.debug("SessionRegistry: started %s", session.id)
        return session

    def suspend_session(self, session_id: str) -> None:
        """Move an active session to ``suspended``.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.
        IllegalTransitionError
            If the session is not active.
        """
        session = self._require(session_id, "suspend", (SessionStatus.ACTIVE,))
        self._transition(session, SessionStatus.SUSPENDED)

    def resume_session(self, session_id: str) -> TaskSession:
        """Reactivate a suspended session, suspending any other active one.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.
        IllegalTransitionError
            If the session is not suspended.
        """
        session = self._require(session_id, "resume", (SessionStatus.SUSPENDED,))
        if self._active_id is not None:
            self.suspend_session(self._active_id)
        self._transition(session, SessionStatus.ACTIVE)
        self._active_id = session.id
        return session

    def complete_session(self, session_id: str, summary: str | None = None) -> str:
        """Mark an active session completed and return its summary.

        Parameters
        ----------
        session_id:
            The session to complete.
        summary:
            Explicit summary.  Defaults to ``"[<task_type>] <N> messages"``
            where N is the length of the session's history.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.
        IllegalTransitionError
            If the session is not active.
        """
        session = self._require(session_id, "complete", (SessionStatus.ACTIVE,))
        if summary is None:
            summary = self._default_summary(session)
        session.summary = summary
        self._transition(session, SessionStatus.COMPLETED)
        return summary

    def discard_session(self, session_id: str) -> None:
        """Abandon an active or suspended session."""
        session = self._require(
            session_id, "discard", (SessionStatus.ACTIVE, SessionStatus.SUSPENDED)
        )
        self._transition(session, SessionStatus.DISCARDED)

    def update_session_state(self, session_id: str, state: Any) -> None:
        """Replace the payload of an active session."""
        session = self._require(session_id, "update state of", (SessionStatus.ACTIVE,))
        session.state = state
        session.touch()

    def reset(self) -> None:
        """Forget every session and history."""
        self._sessions.clear()
        self._histories.clear()
        self._active_id = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_session(self) -> TaskSession | None:
        if self._active_id is None:
            return None
        return self._sessions.get(self._active_id)

    def active_history(self) -> LabeledHistory | None:
        if self._active_id is None:
            return None
        return self._histories.get(self._active_id)

    def suspended_sessions(self) -> list[TaskSession]:
        return [s for s in self._sessions.values() if s.status is SessionStatus.SUSPENDED]

    def all_sessions(self) -> list[TaskSession]:
        return list(self._sessions.values())

    def get_session(self, session_id: str) -> TaskSession | None:
        return self._sessions.get(session_id)

    def history_for(self, session_id: str) -> LabeledHistory | None:
        return self._histories.get(session_id)

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    def pending_count(self) -> int:
        """Return the number of active or suspended sessions."""
        return sum(1 for s in self._sessions.values() if s.is_pending)

    def _default_summary(self, session: TaskSession) -> str:
        history = self._histories.get(session.id)
        count = len(history) if history is not None else 0
        return f"[{session.task_type}] {count} messages"

    def __len__(self) -> int:
        return len(self._sessions)
