"""Phase-tracking view of a task session's state.

The session registry treats ``TaskSession.state`` as opaque.  The session
tools store a ``TaskSessionState`` dump there; this module converts between
the two.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TaskSessionState(BaseModel):
    """Progress of a multi-phase task.

    Parameters
    ----------
    description:
        What the task is producing.
    current_phase:
        Name of the current phase, or None for tasks without phases.
    phase_index:
        Zero-based index of ``current_phase``.
    phase_history:
        Names of every phase entered so far, in order.
    artifacts:
        Paths or identifiers of produced artifacts.
    """

    description: str = ""
    current_phase: str | None = None
    phase_index: int = 0
    phase_history: list[str] = Field(default_factory=list)
    artifacts: list[str] = Field(default_factory=list)

    model_config = {"frozen": False}

    @classmethod
    def from_session_state(cls, state: Any) -> TaskSessionState:
        """Interpret an opaque session payload.  Non-mapping payloads yield an empty state."""
        if isinstance(state, cls):
            return state.model_copy(deep=True)
        if isinstance(state, dict):
            return cls.model_validate(state)
        return cls()

    def to_session_state(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def advanced_to(self, phase_name: str) -> TaskSessionState:
        """Return a copy moved on to ``phase_name``."""
        return self.model_copy(
            update={
                "current_phase": phase_name,
                "phase_index": self.phase_index + 1,
                "phase_history": [*self.phase_history, phase_name],
            }
        )

    def with_artifact(self, artifact: str) -> TaskSessionState:
        return self.model_copy(update={"artifacts": [*self.artifacts, artifact]})


def current_phase_of(state: Any) -> str | None:
    """Return the current phase name stored in an opaque session payload."""
    if isinstance(state, TaskSessionState):
        return state.current_phase
    if isinstance(state, dict):
        phase = state.get("current_phase")
        return phase if isinstance(phase, str) and phase else None
    return None
