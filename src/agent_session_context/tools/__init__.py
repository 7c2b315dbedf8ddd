"""Tool subpackage.

Public surface
--------------
- Tool                 — schema plus async handler
- ToolRegistry         — registration and error-to-string dispatch
- build_core_tools     — workspace file tools, calculator, clock, completion
- build_session_tools  — session-management tools
"""
from __future__ import annotations

from agent_session_context.tools.builtin import (
    ATTEMPT_COMPLETION,
    WRITE_FILE,
    build_core_tools,
    evaluate_expression,
)
from agent_session_context.tools.registry import Tool, ToolRegistry, error_result
from agent_session_context.tools.session_tools import build_session_tools

__all__ = [
    "ATTEMPT_COMPLETION",
    "WRITE_FILE",
    "Tool",
    "ToolRegistry",
    "build_core_tools",
    "build_session_tools",
    "error_result",
    "evaluate_expression",
]
