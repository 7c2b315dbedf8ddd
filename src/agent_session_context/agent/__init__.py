"""Agent loop subpackage.

Public surface
--------------
- AgentLoop      — bounded per-turn loop
- TurnOutcome    — result of one turn
- TurnEndReason  — END_TURN, COMPLETED, MAX_ITERATIONS
"""
from __future__ import annotations

from agent_session_context.agent.loop import AgentLoop, TurnEndReason, TurnOutcome

__all__ = ["AgentLoop", "TurnEndReason", "TurnOutcome"]
