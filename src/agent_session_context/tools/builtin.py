"""Core tools: workspace file access, arithmetic, clock and completion.

File tools are confined to a workspace directory; paths that resolve
outside it are refused.

Functions
---------
- build_core_tools  — create the core tool set for a workspace
"""
from __future__ import annotations

import ast
import operator
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from agent_session_context.llm.types import ToolSchema
from agent_session_context.tools.registry import Tool, error_result

if TYPE_CHECKING:
    from agent_session_context.context.agent_context import AgentContext

ATTEMPT_COMPLETION = "attempt_completion"
WRITE_FILE = "write_file"

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS = {ast.UAdd: operator.pos, ast.USub: operator.neg}


def evaluate_expression(expression: str) -> float | int:
    """Evaluate an arithmetic expression of numbers, ``+ - * /`` and parentheses.

    Raises
    ------
    ValueError
        If the expression contains anything else.
    ZeroDivisionError
        On division by zero.
    """

    def _eval(node: ast.AST) -> float | int:
        if isinstance(node, ast.Expression):
            return _eval(node.body)
        if isinstance(node, ast.Constant) and type(node.value) in (int, float):
            return node.value
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
            return _BINARY_OPS[type(node.op)](_eval(node.left), _eval(node.right))
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
            return _UNARY_OPS[type(node.op)](_eval(node.operand))
        raise ValueError(f"unsupported expression: {expression!r}")

    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError:
        raise ValueError(f"invalid expression: {expression!r}") from None
    return _eval(tree)


def _resolve_inside(workspace: Path, relative: str) -> Path | None:
    candidate = (workspace / relative).resolve()
    root = workspace.resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def build_core_tools(workspace: str | Path) -> list[Tool]:
    """Return the core tools bound to ``workspace``.

    Parameters
    ----------
    workspace:
        Directory the file tools may read and write.  It is not created
        here; ``write_file`` creates parent directories as needed.
    """
    root = Path(workspace)

    async def read_file(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        relative = str(tool_input.get("path", ""))
        path = _resolve_inside(root, relative)
        if path is None:
            return error_result("cannot access files outside the workspace")
        if not path.is_file():
            return error_result(f"file not found: {relative}")
        return path.read_text(encoding="utf-8")

    async def write_file(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        relative = str(tool_input.get("path", ""))
        content = str(tool_input.get("content", ""))
        path = _resolve_inside(root, relative)
        if path is None:
            return error_result("cannot write files outside the workspace")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return f"Wrote {len(content)} characters to {relative}"

    async def list_files(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        relative = str(tool_input.get("path") or ".")
        path = _resolve_inside(root, relative)
        if path is None:
            return error_result("cannot access directories outside the workspace")
        if not path.is_dir():
            return error_result(f"directory not found: {relative}")
        names = sorted(child.name for child in path.iterdir())
        return "\n".join(names) if names else "(empty directory)"

    async def calculator(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        return str(evaluate_expression(str(tool_input.get("expression", ""))))

    async def get_current_time(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        return datetime.now(timezone.utc).isoformat()

    async def attempt_completion(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        return str(tool_input.get("result", ""))

    path_prop = {"type": "string", "description": "Path relative to the workspace"}
    return [
        Tool(
            ToolSchema(
                name="read_file",
                description="Read a file from the workspace.",
                input_schema={"type": "object", "properties": {"path": path_prop}, "required": ["path"]},
            ),
            read_file,
        ),
        Tool(
            ToolSchema(
                name=WRITE_FILE,
                description="Write text to a file in the workspace, replacing its contents.",
                input_schema={
                    "type": "object",
                    "properties": {
                        "path": path_prop,
                        "content": {"type": "string", "description": "Text to write"},
                    },
                    "required": ["path", "content"],
                },
            ),
            write_file,
        ),
        Tool(
            ToolSchema(
                name="list_files",
                description="List a workspace directory; defaults to the workspace root.",
                input_schema={"type": "object", "properties": {"path": path_prop}},
            ),
            list_files,
        ),
        Tool(
            ToolSchema(
                name="calculator",
                description="Evaluate arithmetic with +, -, *, / and parentheses.",
                input_schema={
                    "type": "object",
                    "properties": {
                        "expression": {"type": "string", "description": "Expression to evaluate"}
                    },
                    "required": ["expression"],
                },
            ),
            calculator,
        ),
        Tool(
            ToolSchema(
                name="get_current_time",
                description="Return the current UTC time in ISO-8601 format.",
                input_schema={"type": "object", "properties": {}},
            ),
            get_current_time,
        ),
        Tool(
            ToolSchema(
                name=ATTEMPT_COMPLETION,
                description="Call when the task is finished, with the final result.",
                input_schema={
                    "type": "object",
                    "properties": {
                        "result": {"type": "string", "description": "Final result or message"}
                    },
                    "required": ["result"],
                },
            ),
            attempt_completion,
        ),
    ]
