"""Task session subpackage.

Public surface
--------------
- TaskSession             — one resumable unit of task work
- SessionStatus           — enum: ACTIVE, SUSPENDED, COMPLETED, DISCARDED
- SessionRegistry         — owns sessions and their histories
- SessionNotFoundError    — unknown session id
- IllegalTransitionError  — transition from the wrong status
"""
from __future__ import annotations

from agent_session_context.session.registry import (
    IllegalTransitionError,
    SessionNotFoundError,
    SessionRegistry,
)
from agent_session_context.session.state import SessionStatus, TaskSession, new_session_id

__all__ = [
    "IllegalTransitionError",
    "SessionNotFoundError",
    "SessionRegistry",
    "SessionStatus",
    "TaskSession",
    "new_session_id",
]
