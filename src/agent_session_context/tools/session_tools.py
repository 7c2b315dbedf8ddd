"""Tools that let the model manage task sessions itself.

Every tool here needs an ``AgentContext``.  Recoverable problems (no active
session, unknown task type, nothing to resume) are reported as
``"Error: ..."`` result strings; lifecycle errors raised by the context are
turned into result strings by ``ToolRegistry``.

Functions
---------
- build_session_tools  — create the tool set bound to a ``TaskConfigTable``
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agent_session_context.llm.types import ToolSchema
from agent_session_context.tasks.config import TaskConfigTable
from agent_session_context.tasks.phases import TaskSessionState
from agent_session_context.tools.registry import Tool, error_result

if TYPE_CHECKING:
    from agent_session_context.context.agent_context import AgentContext

NO_ACTIVE_SESSION = error_result("no active session")
NO_CONTEXT = error_result("this tool requires an agent context")


def _schema(
    name: str,
    description: str,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
) -> ToolSchema:
    return ToolSchema(
        name=name,
        description=description,
        input_schema={
            "type": "object",
            "properties": properties or {},
            "required": required or [],
        },
    )


def _string_prop(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


def build_session_tools(task_table: TaskConfigTable) -> list[Tool]:
    """Return the session-management tools bound to ``task_table``.

    Parameters
    ----------
    task_table:
        Configuration used to validate task types, seed phase state and
        describe phases.

    Returns
    -------
    list[Tool]
        ``start_session``, ``advance_phase``, ``get_phase_status``,
        ``add_artifact``, ``list_task_types``, ``suspend_session``,
        ``resume_session``, ``complete_session`` and ``list_sessions``.
    """

    # ------------------------------------------------------------------
    # start / advance / status / artifacts
    # ------------------------------------------------------------------

    async def start_session(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        task_type = str(tool_input.get("task_type", ""))
        description = str(tool_input.get("description", ""))
        user_request = tool_input.get("user_request")

        config = task_table.find_config(task_type)
        if config is None:
            available = ", ".join(task_table.task_names())
            return error_result(f"unknown task type {task_type!r}. Available: {available}")

        first = task_table.first_phase(task_type)
        state = TaskSessionState(
            description=description,
            current_phase=first.name if first is not None else None,
            phase_history=[first.name] if first is not None else [],
        )
        session = context.start_session(task_type, config.default_mode, state.to_session_state())

        # The turn lock still points at the previous history; write straight
        # into the new session's own history.
        if user_request:
            history = context.session_history(session.id)
            if history is not None:
                history.add_user_message(str(user_request))

        lines = [f"Session started: [{session.id}] {config.display_name} - {description}"]
        if first is not None:
            lines.append(f"Current phase: {first.name} - {first.description}")
            lines.append(f"Goal: {first.goal}")
        return "\n".join(lines)

    async def advance_phase(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        session = context.active_session()
        if session is None:
            return NO_ACTIVE_SESSION

        summary = str(tool_input.get("phase_summary", ""))
        state = TaskSessionState.from_session_state(session.state)
        if state.current_phase is None:
            return error_result("this task has no phases")

        current = task_table.find_phase(session.task_type, state.current_phase)
        upcoming = task_table.next_phase(session.task_type, state.current_phase)
        if upcoming is None:
            return (
                f"Phase {state.current_phase!r} is the final phase. "
                f"Use complete_session to finish the task.\nDone: {summary}"
            )
        if current is not None and current.requires_approval and not tool_input.get("user_approved"):
            question = current.approval_prompt or "Shall I continue to the next phase?"
            return (
                f"Phase {state.current_phase!r} is done, but the user must approve "
                f"before moving on.\nDone: {summary}\n\n{question}"
            )

        context.update_session_state(state.advanced_to(upcoming.name).to_session_state())
        return (
            f"Phase complete: {state.current_phase} -> {upcoming.name}\n"
            f"Done: {summary}\n\n"
            f"Next phase: {upcoming.name}\n{upcoming.description}\nGoal: {upcoming.goal}"
        )

    async def get_phase_status(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        session = context.active_session()
        if session is None:
            return NO_ACTIVE_SESSION
        config = task_table.find_config(session.task_type)
        if config is None:
            return error_result(f"no configuration for task {session.task_type!r}")

        state = TaskSessionState.from_session_state(session.state)
        lines = [
            f"Task: {config.display_name}",
            f"Description: {state.description}",
            f"Goal: {config.goal}",
            "",
        ]
        if config.phases and state.current_phase:
            phase = task_table.find_phase(session.task_type, state.current_phase)
            lines.append(
                f"Current phase: {state.current_phase} "
                f"({state.phase_index + 1}/{len(config.phases)})"
            )
            if phase is not None:
                lines.append(f"  {phase.description}")
                lines.append(f"  Goal: {phase.goal}")
            lines.append("")
            lines.append("Phase history:")
            for name in state.phase_history:
                mark = "->" if name == state.current_phase else "ok"
                lines.append(f"  {mark} {name}")
        else:
            lines.append("Phases: none defined")

        if state.artifacts:
            lines.append("")
            lines.append("Artifacts:")
            lines.extend(f"  - {artifact}" for artifact in state.artifacts)

        lines.append("")
        lines.append("Completion criteria:")
        lines.extend(f"  - {item}" for item in config.completion_criteria)
        return "\n".join(lines)

    async def add_artifact(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        session = context.active_session()
        if session is None:
            return NO_ACTIVE_SESSION
        path = str(tool_input.get("path", ""))
        state = TaskSessionState.from_session_state(session.state)
        context.update_session_state(state.with_artifact(path).to_session_state())
        return f"Artifact recorded: {path}"

    async def list_task_types(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        lines = ["Available task types:"]
        for name in task_table.task_names():
            config = task_table.get_config(name)
            lines.append(f"\n[{name}] {config.display_name}")
            lines.append(f"  {config.description}")
            lines.append(f"  Goal: {config.goal}")
            if config.phases:
                lines.append(f"  Phases: {' -> '.join(config.phase_names())}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # suspend / resume / complete / list
    # ------------------------------------------------------------------

    async def suspend_session(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        session = context.active_session()
        if session is None:
            return NO_ACTIVE_SESSION
        reason = tool_input.get("reason") or "user request"
        state = TaskSessionState.from_session_state(session.state)
        context.suspend_current_session()

        result = f"Session suspended: [{session.id}] {session.task_type} - {reason}"
        if state.current_phase:
            result += f"\nSuspended in phase: {state.current_phase}"
        return result

    async def resume_session(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        suspended = context.suspended_sessions()
        if not suspended:
            return error_result("no suspended sessions")

        session_id = tool_input.get("session_id")
        if session_id:
            matches = [s for s in suspended if s.id == session_id]
            if not matches:
                return error_result(f"session {session_id!r} not found")
            target = matches[0]
        else:
            target = max(suspended, key=lambda s: s.updated_at)

        context.resume_session(target.id)

        result = f"Session resumed: [{target.id}] {target.task_type}"
        state = TaskSessionState.from_session_state(target.state)
        if state.current_phase:
            result += f"\nCurrent phase: {state.current_phase}"
            phase = task_table.find_phase(target.task_type, state.current_phase)
            if phase is not None:
                result += f"\n  {phase.description}\n  Goal: {phase.goal}"
        return result

    async def complete_session(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        session = context.active_session()
        if session is None:
            return NO_ACTIVE_SESSION
        state = TaskSessionState.from_session_state(session.state)
        summary = context.complete_current_session(tool_input.get("summary"))

        result = f"Session completed: [{session.id}] {summary}"
        if state.artifacts:
            result += "\n\nArtifacts:"
            for artifact in state.artifacts:
                result += f"\n  - {artifact}"
        return result

    async def list_sessions(tool_input: dict[str, Any], context: AgentContext | None) -> str:
        if context is None:
            return NO_CONTEXT
        status = context.status()
        lines = [f"Current mode: {status.current_mode.value}"]

        if status.active_task is not None:
            config = task_table.find_config(status.active_task.task_type)
            label = config.display_name if config is not None else status.active_task.task_type
            lines.append(f"Active: [{status.active_task.id}] {label}")
            if status.active_task.current_phase:
                lines.append(f"   Phase: {status.active_task.current_phase}")
        else:
            lines.append("No active task")

        if status.suspended_tasks:
            lines.append("Suspended:")
            for task in status.suspended_tasks:
                config = task_table.find_config(task.task_type)
                label = config.display_name if config is not None else task.task_type
                lines.append(f"   [{task.id}] {label}")
        return "\n".join(lines)

    return [
        Tool(
            _schema(
                "start_session",
                "Start a new task session when the user asks for a task. Put the user's "
                "concrete instructions in user_request.",
                {
                    "task_type": _string_prop("Task type (see list_task_types)"),
                    "description": _string_prop("What the task will produce"),
                    "user_request": _string_prop(
                        "The user's original request; seeds the session history"
                    ),
                },
                ["task_type", "description"],
            ),
            start_session,
            requires_context=True,
        ),
        Tool(
            _schema(
                "advance_phase",
                "Finish the current phase and move to the next. Phases that require "
                "approval stop and ask the user first; call again with user_approved "
                "once the user has agreed.",
                {
                    "phase_summary": _string_prop("What was achieved in the current phase"),
                    "user_approved": {
                        "type": "boolean",
                        "description": "True once the user has approved moving on",
                    },
                },
                ["phase_summary"],
            ),
            advance_phase,
            requires_context=True,
        ),
        Tool(
            _schema("get_phase_status", "Show the phase status of the current task."),
            get_phase_status,
            requires_context=True,
        ),
        Tool(
            _schema(
                "add_artifact",
                "Record a produced artifact such as a file path.",
                {"path": _string_prop("Artifact path")},
                ["path"],
            ),
            add_artifact,
            requires_context=True,
        ),
        Tool(
            _schema("list_task_types", "List the available task types."),
            list_task_types,
        ),
        Tool(
            _schema(
                "suspend_session",
                "Suspend the current task session when the user wants to stop for now.",
                {"reason": _string_prop("Why the session is suspended (optional)")},
            ),
            suspend_session,
            requires_context=True,
        ),
        Tool(
            _schema(
                "resume_session",
                "Resume a suspended task session when the user wants to pick up where "
                "they left off.",
                {
                    "session_id": _string_prop(
                        "Session to resume; defaults to the most recently suspended one"
                    )
                },
            ),
            resume_session,
            requires_context=True,
        ),
        Tool(
            _schema(
                "complete_session",
                "Complete the current task session once the task is finished.",
                {"summary": _string_prop("What the task achieved")},
                ["summary"],
            ),
            complete_session,
            requires_context=True,
        ),
        Tool(
            _schema(
                "list_sessions",
                "Show the active task and any suspended tasks.",
            ),
            list_sessions,
            requires_context=True,
        ),
    ]
