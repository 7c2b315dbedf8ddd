"""Task session domain models.

Classes
-------
- SessionStatus  — enum for task session lifecycle states
- TaskSession    — one resumable unit of task work
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Lifecycle states for a task session."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    DISCARDED = "discarded"


def new_session_id(task_type: str) -> str:
    """Return a fresh id of the form ``<task_type>-<unique suffix>``."""
    return f"{task_type}-{uuid4().hex}"


class TaskSession(BaseModel):
    """A resumable unit of task work with its own history.

    Parameters
    ----------
    id:
        Unique session id, prefixed with the task type.
    task_type:
        Name of the task configuration this session runs.
    status:
        Current lifecycle state.
    state:
        Task-specific payload.  Opaque to the registry.
    created_at:
        UTC creation timestamp.
    updated_at:
        UTC timestamp of the last transition or state update.
    summary:
        Completion summary, set when the session completes.
    """

    id: str
    task_type: str
    status: SessionStatus = SessionStatus.ACTIVE
    state: Any = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    summary: str | None = None

    model_config = {"frozen": False}

    def touch(self) -> None:
        """Refresh ``updated_at`` to the current UTC time."""
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_pending(self) -> bool:
        return self.status in (SessionStatus.ACTIVE, SessionStatus.SUSPENDED)
