"""Mode stack with a permanent base frame.

Classes
-------
- ModeStackEntry  — one pushed mode, optionally tagged with a session id
- ModeStack       — push/pop stack that never loses its base frame
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from agent_session_context.modes.profiles import DEFAULT_MODE, AgentMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeStackEntry:
    """A single frame of the mode stack.

    Parameters
    ----------
    mode:
        The mode active while this frame is on top.
    entered_at:
        UTC time the frame was pushed.
    session_id:
        Id of the task session that pushed this frame, if any.
    """

    mode: AgentMode
    entered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None


class ModeStack:
    """Stack of nested operating modes.

    The stack is created with a base frame that can never be popped, so
    ``current()`` always has an answer.  Frames pushed on behalf of a task
    session carry its id, which lets ``pop_to_session`` return to the frame
    owning an interrupted task regardless of how many frames were pushed on
    top of it.

    Parameters
    ----------
    initial_mode:
        Mode of the base frame.  Default: ``AgentMode.CONVERSATION``.
    """

    def __init__(self, initial_mode: AgentMode | str = DEFAULT_MODE) -> None:
        self._stack: list[ModeStackEntry] = [ModeStackEntry(mode=AgentMode(initial_mode))]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current(self) -> AgentMode:
        """Return the mode of the top frame."""
        return self._stack[-1].mode

    def current_entry(self) -> ModeStackEntry:
        return self._stack[-1]

    def base_entry(self) -> ModeStackEntry:
        return self._stack[0]

    def entries(self) -> list[ModeStackEntry]:
        """Return a copy of all frames, base first."""
        return list(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def has_session(self, session_id: str) -> bool:
        """Return True if any frame carries ``session_id``."""
        return any(entry.session_id == session_id for entry in self._stack)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def push(self, mode: AgentMode | str, session_id: str | None = None) -> ModeStackEntry:
        """Push a new frame and return it."""
        entry = ModeStackEntry(mode=AgentMode(mode), session_id=session_id)
        self._stack.append(entry)
        logger.debug(
            "ModeStack: pushed %s (session=%r, depth=%d)", entry.mode.value, session_id, self.depth
        )
        return entry

    def pop(self) -> ModeStackEntry | None:
        """Pop the top frame.

        Returns
        -------
        ModeStackEntry | None
            The removed frame, or None when only the base frame remains (in
            which case nothing changes).
        """
        if len(self._stack) <= 1:
            return None
        entry = self._stack.pop()
        logger.debug("ModeStack: popped %s (depth=%d)", entry.mode.value, self.depth)
        return entry

    def pop_to_base(self) -> list[ModeStackEntry]:
        """Pop every frame above the base, most recent first."""
        popped: list[ModeStackEntry] = []
        while len(self._stack) > 1:
            popped.append(self._stack.pop())
        if popped:
            logger.debug("ModeStack: popped %d frame(s) to base", len(popped))
        return popped

    def pop_to_session(self, session_id: str) -> list[ModeStackEntry]:
        """Pop until the top frame carries ``session_id``.

        The matching frame itself stays on the stack.  If no frame carries
        the id, this behaves like ``pop_to_base``.

        Returns
        -------
        list[ModeStackEntry]
            Popped frames, most recent first.
        """
        popped: list[ModeStackEntry] = []
        while len(self._stack) > 1 and self._stack[-1].session_id != session_id:
            popped.append(self._stack.pop())
        if popped:
            logger.debug(
                "ModeStack: popped %d frame(s) to session %r", len(popped), session_id
            )
        return popped

    def remove_session(self, session_id: str) -> list[ModeStackEntry]:
        """Remove every frame tagged with ``session_id``, wherever it sits.

        Frames above and below are kept in order.  The base frame is never
        removed.

        Returns
        -------
        list[ModeStackEntry]
            Removed frames, most recent first.
        """
        base, rest = self._stack[0], self._stack[1:]
        removed = [entry for entry in reversed(rest) if entry.session_id == session_id]
        if removed:
            self._stack = [base, *(entry for entry in rest if entry.session_id != session_id)]
            logger.debug(
                "ModeStack: removed %d frame(s) of session %r", len(removed), session_id
            )
        return removed

    def reset(self, mode: AgentMode | str = DEFAULT_MODE) -> None:
        """Discard all frames and start over with a single base frame."""
        self._stack = [ModeStackEntry(mode=AgentMode(mode))]

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._stack)

    def __repr__(self) -> str:
        modes = " > ".join(entry.mode.value for entry in self._stack)
        return f"ModeStack({modes})"
