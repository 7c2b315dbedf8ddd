"""Agent modes and their static profiles.

Classes
-------
- AgentMode    — closed set of operating contexts
- ModeProfile  — immutable prompt/tool/limit settings for one mode
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel


class AgentMode(str, Enum):
    """Operating contexts the agent can be in."""

    EXPLORATION = "exploration"
    PLANNING = "planning"
    IMPLEMENTATION = "implementation"
    REVIEW = "review"
    CONVERSATION = "conversation"


DEFAULT_MODE = AgentMode.CONVERSATION

SESSION_TOOL_NAMES: tuple[str, ...] = (
    "start_session",
    "suspend_session",
    "resume_session",
    "complete_session",
    "list_sessions",
)


class ModeProfile(BaseModel):
    """Static settings applied while a mode is on top of the stack.

    Parameters
    ----------
    name:
        The mode this profile describes.
    display_name:
        Human-readable name.
    description:
        One-line description of the mode's purpose.
    system_prompt:
        System prompt used when no task configuration overrides it.
    enabled_tools:
        Names of the tools the model may call in this mode.
    allow_file_write:
        Whether file-writing tools may run.
    max_iterations:
        Ceiling on model calls within a single turn.
    """

    name: AgentMode
    display_name: str
    description: str
    system_prompt: str
    enabled_tools: tuple[str, ...]
    allow_file_write: bool
    max_iterations: int

    model_config = {"frozen": True}


MODE_PROFILES: MappingProxyType[AgentMode, ModeProfile] = MappingProxyType(
    {
        AgentMode.EXPLORATION: ModeProfile(
            name=AgentMode.EXPLORATION,
            display_name="Exploration",
            description="Explore the codebase and understand its structure.",
            system_prompt=(
                "You are an agent that explores and explains a codebase.\n"
                "- Read files to understand how the code is organised.\n"
                "- Gather the information needed to answer questions.\n"
                "- Do not modify any code."
            ),
            enabled_tools=("read_file", "list_files", "get_current_time"),
            allow_file_write=False,
            max_iterations=50,
        ),
        AgentMode.PLANNING: ModeProfile(
            name=AgentMode.PLANNING,
            display_name="Planning",
            description="Produce an implementation plan.",
            system_prompt=(
                "You are an agent that writes implementation plans.\n"
                "- Analyse the task and lay out the implementation steps.\n"
                "- Identify the files and places that need to change.\n"
                "- Produce a plan only; do not change code."
            ),
            enabled_tools=("read_file", "list_files", "get_current_time", "calculator"),
            allow_file_write=False,
            max_iterations=30,
        ),
        AgentMode.IMPLEMENTATION: ModeProfile(
            name=AgentMode.IMPLEMENTATION,
            display_name="Implementation",
            description="Implement and modify code.",
            system_prompt=(
                "You are an agent that implements code.\n"
                "- Implement the code according to the plan.\n"
                "- You may read and write files.\n"
                "- Change things carefully and follow the existing style."
            ),
            enabled_tools=(
                "read_file",
                "write_file",
                "list_files",
                "get_current_time",
                "calculator",
            ),
            allow_file_write=True,
            max_iterations=25,
        ),
        AgentMode.REVIEW: ModeProfile(
            name=AgentMode.REVIEW,
            display_name="Review",
            description="Review changes and check test results.",
            system_prompt=(
                "You are an agent that reviews code.\n"
                "- Inspect the changes.\n"
                "- Point out problems and possible improvements.\n"
                "- Check the results of the test run."
            ),
            enabled_tools=("read_file", "list_files", "get_current_time"),
            allow_file_write=False,
            max_iterations=20,
        ),
        AgentMode.CONVERSATION: ModeProfile(
            name=AgentMode.CONVERSATION,
            display_name="Conversation",
            description="General conversation.",
            system_prompt=(
                "You are an AI assistant. Answer the user's questions and help with tasks.\n"
                "\n"
                "Task management:\n"
                "- When the user asks for a task (a MulmoScript, generated code, ...), "
                "call start_session.\n"
                "- When told to stop for now or do it later, call suspend_session.\n"
                "- When asked to pick up where you left off, call resume_session.\n"
                "- When the task is finished, call complete_session.\n"
                "- Use list_sessions to check the state of sessions."
            ),
            enabled_tools=(
                "read_file",
                "write_file",
                "list_files",
                "calculator",
                "get_current_time",
                "attempt_completion",
                *SESSION_TOOL_NAMES,
            ),
            allow_file_write=True,
            max_iterations=25,
        ),
    }
)


def get_mode_profile(mode: AgentMode | str) -> ModeProfile:
    """Return the profile for ``mode``.

    Raises
    ------
    ValueError
        If ``mode`` is not a known ``AgentMode`` value.
    """
    return MODE_PROFILES[AgentMode(mode)]
