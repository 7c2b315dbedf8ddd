"""Per-agent context: modes, sessions and history composed behind one facade.

``AgentContext`` owns a ``ModeStack``, a ``SessionRegistry`` and a
long-lived base history.  Each task session has its own history; only the
completion summary of a session ever reaches the base history.

Turn locking
------------
``begin_turn`` records which history the turn started on.  Until
``end_turn`` every history delegate writes there, even if a tool call in the
middle of the turn starts, suspends or resumes a session.  The new session's
history takes effect from the next turn.

Classes
-------
- ContextConfig   — construction options
- ContextStatus   — snapshot returned by ``AgentContext.status``
- AgentContext    — the composition root
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.history.message import LabeledMessage
from agent_session_context.llm.types import BaseMessage, ContentBlock, ToolSchema
from agent_session_context.modes.profiles import (
    DEFAULT_MODE,
    AgentMode,
    ModeProfile,
    get_mode_profile,
)
from agent_session_context.modes.stack import ModeStack, ModeStackEntry
from agent_session_context.session.registry import IllegalTransitionError, SessionRegistry
from agent_session_context.session.state import SessionStatus, TaskSession
from agent_session_context.tasks.config import TaskConfigTable
from agent_session_context.tasks.phases import current_phase_of

logger = logging.getLogger(__name__)

# Distinguishes "no turn in progress" from "turn locked to the base history" (None).
_UNLOCKED = object()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContextConfig:
    """Options for constructing an ``AgentContext``.

    Parameters
    ----------
    initial_mode:
        Mode of the base stack frame.  Default ``conversation``.
    fallback_task_mode:
        Mode pushed for a session whose task is not in the configuration
        table and no explicit mode was given.  Default ``implementation``.
    """

    initial_mode: AgentMode = DEFAULT_MODE
    fallback_task_mode: AgentMode = AgentMode.IMPLEMENTATION

    def __post_init__(self) -> None:
        for name in ("initial_mode", "fallback_task_mode"):
            value = getattr(self, name)
            try:
                object.__setattr__(self, name, AgentMode(value))
            except ValueError:
                raise ValueError(
                    f"{name} must be one of {[m.value for m in AgentMode]}, got {value!r}."
                ) from None


@dataclass(frozen=True)
class TaskSummary:
    """Short description of one session inside a ``ContextStatus``."""

    id: str
    task_type: str
    status: SessionStatus
    current_phase: str | None = None


@dataclass(frozen=True)
class ContextStatus:
    """Snapshot of the context at one moment.

    Parameters
    ----------
    current_mode:
        Mode of the top stack frame.
    mode_stack_depth:
        Number of frames, base included.
    active_task:
        The active session, or None.
    suspended_tasks:
        Every suspended session.
    in_turn:
        Whether a turn is in progress.
    """

    current_mode: AgentMode
    mode_stack_depth: int
    active_task: TaskSummary | None = None
    suspended_tasks: tuple[TaskSummary, ...] = field(default_factory=tuple)
    in_turn: bool = False


def _summarize_session(session: TaskSession) -> TaskSummary:
    return TaskSummary(
        id=session.id,
        task_type=session.task_type,
        status=session.status,
        current_phase=current_phase_of(session.state),
    )


# ---------------------------------------------------------------------------
# AgentContext
# ---------------------------------------------------------------------------


class AgentContext:
    """Compose the mode stack, session registry and histories for one agent.

    Parameters
    ----------
    task_table:
        Task configurations used for tool and prompt resolution and for a
        session's default mode.  Defaults to ``TaskConfigTable.default()``.
    config:
        Construction options.  Defaults to ``ContextConfig()``.
    """

    def __init__(
        self,
        task_table: TaskConfigTable | None = None,
        config: ContextConfig | None = None,
    ) -> None:
        self.config = config or ContextConfig()
        self.task_table = task_table if task_table is not None else TaskConfigTable.default()
        self.base_history = LabeledHistory()
        self.modes = ModeStack(self.config.initial_mode)
        self.sessions = SessionRegistry()
        self._turn_lock: object = _UNLOCKED

    # ------------------------------------------------------------------
    # Turn management
    # ------------------------------------------------------------------

    def begin_turn(self) -> None:
        """Lock the current history target for the duration of a turn."""
        active = self.sessions.active_session()
        self._turn_lock = active.id if active is not None else None
        logger.debug("AgentContext: turn locked to %r", self._turn_lock)

    def end_turn(self) -> None:
        """Release the turn lock."""
        self._turn_lock = _UNLOCKED
        logger.debug("AgentContext: turn lock released")

    @property
    def in_turn(self) -> bool:
        return self._turn_lock is not _UNLOCKED

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def mode(self) -> AgentMode:
        return self.modes.current()

    def mode_profile(self) -> ModeProfile:
        return get_mode_profile(self.mode())

    def push_mode(self, mode: AgentMode | str, session_id: str | None = None) -> ModeStackEntry:
        return self.modes.push(mode, session_id)

    def pop_mode(self) -> ModeStackEntry | None:
        return self.modes.pop()

    def mode_stack(self) -> list[ModeStackEntry]:
        return self.modes.entries()

    def can_write_files(self) -> bool:
        return self.mode_profile().allow_file_write

    def max_iterations(self) -> int:
        return self.mode_profile().max_iterations

    # ------------------------------------------------------------------
    # Tool and prompt resolution
    # ------------------------------------------------------------------

    def enabled_tool_names(self) -> list[str]:
        """Return the tools the model may call right now.

        With an active session the task table decides, using the session's
        current phase.  An empty answer falls back to the mode profile.
        """
        session = self.sessions.active_session()
        if session is not None:
            names = self.task_table.enabled_tools(
                session.task_type, current_phase_of(session.state)
            )
            if names:
                return names
        return list(self.mode_profile().enabled_tools)

    def is_tool_enabled(self, tool_name: str) -> bool:
        return tool_name in self.enabled_tool_names()

    def enabled_tools(self, schemas: Sequence[ToolSchema]) -> list[ToolSchema]:
        """Filter ``schemas`` down to the enabled tools, preserving order."""
        names = set(self.enabled_tool_names())
        return [schema for schema in schemas if schema.name in names]

    def system_prompt(self) -> str:
        """Return the task prompt of the active session, else the mode prompt."""
        session = self.sessions.active_session()
        if session is not None:
            prompt = self.task_table.system_prompt(
                session.task_type, current_phase_of(session.state)
            )
            if prompt:
                return prompt
        return self.mode_profile().system_prompt

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _default_mode_for(self, task_type: str) -> AgentMode:
        config = self.task_table.find_config(task_type)
        if config is not None:
            return config.default_mode
        return self.config.fallback_task_mode

    def _require_active(self, action: str) -> TaskSession:
        session = self.sessions.active_session()
        if session is None:
            raise IllegalTransitionError(None, action)
        return session

    def _leave_frames_of(self, previous: TaskSession | None) -> None:
        """Pop back to base when ``previous`` still has frames on the stack."""
        if previous is not None and self.modes.has_session(previous.id):
            self.modes.pop_to_base()

    def start_session(
        self,
        task_type: str,
        mode: AgentMode | str | None = None,
        initial_state: Any = None,
    ) -> TaskSession:
        """Start a task session and push a mode frame tagged with its id.

        Parameters
        ----------
        task_type:
            Task configuration name.
        mode:
            Mode to push.  Defaults to the task's ``default_mode``, or
            ``ContextConfig.fallback_task_mode`` for unknown tasks.
        initial_state:
            Opaque task payload.

        A previously active session is suspended and its frames are popped,
        as with ``suspend_current_session``.
        """
        previous = self.sessions.active_session()
        session = self.sessions.start_session(task_type, initial_state)
        self._leave_frames_of(previous)
        self.modes.push(mode if mode is not None else self._default_mode_for(task_type), session.id)
        return session

    def suspend_current_session(self) -> TaskSession:
        """Suspend the active session and return to the base mode.

        Raises
        ------
        IllegalTransitionError
            If there is no active session.
        """
        session = self._require_active("suspend")
        self.sessions.suspend_session(session.id)
        self.modes.pop_to_base()
        return session

    def resume_session(self, session_id: str, mode: AgentMode | str | None = None) -> TaskSession:
        """Resume a suspended session.

        If a frame tagged with the session is still on the stack, frames above
        it are popped; otherwise a new tagged frame is pushed.

        Raises
        ------
        SessionNotFoundError
            If ``session_id`` is unknown.
        IllegalTransitionError
            If the session is not suspended.
        """
        previous = self.sessions.active_session()
        session = self.sessions.resume_session(session_id)
        if self.modes.has_session(session.id):
            self.modes.pop_to_session(session.id)
        else:
            self._leave_frames_of(previous)
            target = mode if mode is not None else self._default_mode_for(session.task_type)
            self.modes.push(target, session.id)
        return session

    def complete_current_session(self, summary: str | None = None) -> str:
        """Complete the active session and record its summary in the base history.

        Returns
        -------
        str
            The session summary (explicit or generated).

        Raises
        ------
        IllegalTransitionError
            If there is no active session.
        """
        session = self._require_active("complete")
        result = self.sessions.complete_session(session.id, summary)
        self.base_history.add_task_completion(f"[Session {session.id}] {result}")
        self.modes.pop_to_base()
        return result

    def discard_session(self, session_id: str) -> None:
        """Discard a session and drop its mode frames.

        Discarding the active session pops back to base.  Discarding a
        suspended one removes only the frames tagged with its id, so the
        mode of whatever session is active stays in place.
        """
        active = self.sessions.active_session()
        self.sessions.discard_session(session_id)
        if active is not None and active.id == session_id:
            self.modes.pop_to_base()
        else:
            self.modes.remove_session(session_id)

    def update_session_state(self, state: Any) -> None:
        """Replace the payload of the active session."""
        session = self._require_active("update state of")
        self.sessions.update_session_state(session.id, state)

    def active_session(self) -> TaskSession | None:
        return self.sessions.active_session()

    def suspended_sessions(self) -> list[TaskSession]:
        return self.sessions.suspended_sessions()

    def session_history(self, session_id: str) -> LabeledHistory | None:
        return self.sessions.history_for(session_id)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def current_history(self) -> LabeledHistory:
        """Return the history messages should be written to now."""
        if self._turn_lock is not _UNLOCKED:
            if self._turn_lock is None:
                return self.base_history
            locked = self.sessions.history_for(str(self._turn_lock))
            return locked if locked is not None else self.base_history
        active = self.sessions.active_history()
        return active if active is not None else self.base_history

    def add_user_message(self, content: str, tags: Sequence[str] | None = None) -> LabeledMessage:
        return self.current_history().add_user_message(content, tags)

    def add_assistant_message(
        self, content: Sequence[ContentBlock], tags: Sequence[str] | None = None
    ) -> LabeledMessage:
        return self.current_history().add_assistant_message(content, tags)

    def add_tool_call(
        self, tool_name: str, tool_use_id: str, content: Sequence[ContentBlock]
    ) -> LabeledMessage:
        return self.current_history().add_tool_call(tool_name, tool_use_id, content)

    def add_tool_result(self, tool_name: str, tool_use_id: str, result: str) -> LabeledMessage:
        return self.current_history().add_tool_result(tool_name, tool_use_id, result)

    def add_task_completion(self, result: str) -> LabeledMessage:
        return self.current_history().add_task_completion(result)

    def add_error(self, error: str) -> LabeledMessage:
        return self.current_history().add_error(error)

    def messages(self) -> list[LabeledMessage]:
        return self.current_history().get_all()

    def to_base_messages(self) -> list[BaseMessage]:
        return self.current_history().to_base_messages()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> ContextStatus:
        active = self.sessions.active_session()
        return ContextStatus(
            current_mode=self.mode(),
            mode_stack_depth=self.modes.depth,
            active_task=_summarize_session(active) if active is not None else None,
            suspended_tasks=tuple(
                _summarize_session(s) for s in self.sessions.suspended_sessions()
            ),
            in_turn=self.in_turn,
        )

    def reset(self) -> None:
        """Clear the base history, every session and the mode stack."""
        self.base_history.clear()
        self.modes.reset(self.config.initial_mode)
        self.sessions.reset()
        self._turn_lock = _UNLOCKED
        logger.debug("AgentContext: reset")
