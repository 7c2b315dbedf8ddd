"""Task configuration table.

A ``TaskConfigTable`` maps task names to ``TaskConfig`` records describing
the prompts, tools and phases of each kind of task.  One table is built at
start-up and passed explicitly to the objects that need it.

Classes
-------
- TaskPhase            — one step of a multi-phase task
- TaskConfig           — full configuration for one task type
- TaskConfigFile       — on-disk document: ``{version, tasks}``
- TaskConfigTable      — lookup, tool and prompt resolution
- TaskNotFoundError    — unknown task name
- PhaseNotFoundError   — unknown phase within a known task
- ConfigVersionError   — unsupported configuration file version
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field

from agent_session_context.modes.profiles import AgentMode

logger = logging.getLogger(__name__)

CORE_TOOLS: frozenset[str] = frozenset(
    {
        "read_file",
        "write_file",
        "list_files",
        "shell",
        "http_fetch",
        "calculator",
        "get_current_time",
        "attempt_completion",
    }
)


class TaskNotFoundError(KeyError):
    """Raised when a task name is not in the table."""

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f"Task {task_name!r} not found.")


class PhaseNotFoundError(TaskNotFoundError):
    """Raised when a known task has no phase with the requested name."""

    def __init__(self, task_name: str, phase_name: str) -> None:
        self.phase_name = phase_name
        super().__init__(task_name)
        self.args = (f"Phase {phase_name!r} not found in task {task_name!r}.",)


class ConfigVersionError(ValueError):
    """Raised when a configuration file declares an unsupported version."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(
            f"Unsupported task configuration version {version!r}; "
            f"supported: {sorted(TaskConfigFile.SUPPORTED_VERSIONS)}."
        )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TaskPhase(BaseModel):
    """One step of a multi-phase task.

    Parameters
    ----------
    name:
        Phase identifier, unique within its task.
    description:
        Short description shown to the model and the user.
    goal:
        What the phase must achieve.
    system_prompt:
        Extra prompt appended to the task prompt while this phase is current.
    requires_approval:
        When True, ``advance_phase`` stops and asks for user confirmation.
    approval_prompt:
        Question shown when approval is required.
    enabled_tools:
        Tool list that replaces the task's tool list during this phase.
    """

    name: str
    description: str
    goal: str
    system_prompt: str | None = None
    requires_approval: bool = False
    approval_prompt: str | None = None
    enabled_tools: list[str] | None = None

    model_config = {"frozen": False}


class TaskConfig(BaseModel):
    """Configuration for one task type."""

    name: str
    display_name: str
    description: str
    goal: str
    default_mode: AgentMode = AgentMode.IMPLEMENTATION
    system_prompt: str
    enabled_core_tools: list[str] = Field(default_factory=list)
    enabled_task_tools: list[str] = Field(default_factory=list)
    phases: list[TaskPhase] = Field(default_factory=list)
    completion_criteria: list[str] = Field(default_factory=list)

    model_config = {"frozen": False}

    def phase_names(self) -> list[str]:
        return [phase.name for phase in self.phases]


class TaskConfigFile(BaseModel):
    """On-disk configuration document.

    Task entries may omit ``name``; the mapping key is used instead.
    """

    SUPPORTED_VERSIONS: ClassVar[frozenset[str]] = frozenset({"1.0"})

    version: str = "1.0"
    tasks: dict[str, dict[str, Any]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TaskConfigTable:
    """Registry of task configurations.

    Parameters
    ----------
    configs:
        Initial configurations.  Later entries with the same name replace
        earlier ones.
    """

    def __init__(self, configs: list[TaskConfig] | None = None) -> None:
        self._configs: dict[str, TaskConfig] = {}
        for config in configs or []:
            self.register(config)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> TaskConfigTable:
        """Return a table holding the built-in task definitions."""
        from agent_session_context.tasks.definitions import BUILTIN_TASKS

        return cls([config.model_copy(deep=True) for config in BUILTIN_TASKS])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskConfigTable:
        """Build a table from a parsed ``{version, tasks}`` document.

        Raises
        ------
        ConfigVersionError
            If ``version`` is not supported.
        pydantic.ValidationError
            If a task entry is malformed.
        """
        document = TaskConfigFile.model_validate(data)
        if document.version not in TaskConfigFile.SUPPORTED_VERSIONS:
            raise ConfigVersionError(document.version)
        table = cls()
        for name, raw in document.tasks.items():
            table.register(TaskConfig.model_validate({**raw, "name": name}))
        return table

    @classmethod
    def from_file(cls, path: str | Path) -> TaskConfigTable:
        """Load a table from a JSON or YAML file.

        The format is chosen by suffix: ``.yaml``/``.yml`` are read as YAML,
        anything else as JSON.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        ValueError
            If the document is not a mapping.
        """
        file_path = Path(path)
        raw = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(
                f"Task configuration must be a mapping, got {type(data).__name__}."
            )
        logger.debug("TaskConfigTable: loading %s", file_path)
        return cls.from_dict(data)

    def register(self, config: TaskConfig) -> None:
        """Add or replace ``config``, warning about unknown core tools."""
        for tool in config.enabled_core_tools:
            if tool not in CORE_TOOLS:
                logger.warning(
                    "TaskConfigTable: unknown core tool %r in task %r", tool, config.name
                )
        self._configs[config.name] = config

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_config(self, task_name: str) -> TaskConfig:
        """Return the configuration for ``task_name``.

        Raises
        ------
        TaskNotFoundError
            If no such task is registered.
        """
        config = self._configs.get(task_name)
        if config is None:
            raise TaskNotFoundError(task_name)
        return config

    def find_config(self, task_name: str) -> TaskConfig | None:
        return self._configs.get(task_name)

    def has_task(self, task_name: str) -> bool:
        return task_name in self._configs

    def task_names(self) -> list[str]:
        """Return task names in registration order."""
        return list(self._configs)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def find_phase(self, task_name: str, phase_name: str | None) -> TaskPhase | None:
        config = self._configs.get(task_name)
        if config is None or not phase_name:
            return None
        for phase in config.phases:
            if phase.name == phase_name:
                return phase
        return None

    def get_phase(self, task_name: str, phase_name: str) -> TaskPhase:
        """Return the named phase.

        Raises
        ------
        TaskNotFoundError
            If the task is unknown.
        PhaseNotFoundError
            If the task has no such phase.
        """
        self.get_config(task_name)
        phase = self.find_phase(task_name, phase_name)
        if phase is None:
            raise PhaseNotFoundError(task_name, phase_name)
        return phase

    def first_phase(self, task_name: str) -> TaskPhase | None:
        config = self._configs.get(task_name)
        if config is None or not config.phases:
            return None
        return config.phases[0]

    def next_phase(self, task_name: str, phase_name: str) -> TaskPhase | None:
        """Return the phase after ``phase_name``, or None if it is the last or unknown."""
        config = self._configs.get(task_name)
        if config is None:
            return None
        names = config.phase_names()
        if phase_name not in names:
            return None
        index = names.index(phase_name)
        if index >= len(names) - 1:
            return None
        return config.phases[index + 1]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def enabled_tools(self, task_name: str, phase_name: str | None = None) -> list[str]:
        """Return the tool names available to a task, optionally within a phase.

        A phase with its own ``enabled_tools`` replaces the task's list;
        otherwise the task's core tools followed by its task tools are
        returned.  Unknown tasks yield an empty list.
        """
        config = self._configs.get(task_name)
        if config is None:
            return []
        phase = self.find_phase(task_name, phase_name)
        if phase is not None and phase.enabled_tools is not None:
            return list(phase.enabled_tools)
        return [*config.enabled_core_tools, *config.enabled_task_tools]

    def system_prompt(self, task_name: str, phase_name: str | None = None) -> str:
        """Compose the system prompt for a task, optionally within a phase.

        The task prompt is followed by a current-phase section when the phase
        defines a prompt, then by the completion criteria.  Unknown tasks
        yield an empty string.
        """
        config = self._configs.get(task_name)
        if config is None:
            return ""
        prompt = config.system_prompt
        phase = self.find_phase(task_name, phase_name)
        if phase is not None and phase.system_prompt:
            prompt += f"\n\n## Current phase: {phase.name}\n{phase.system_prompt}"
        if config.completion_criteria:
            criteria = "\n".join(f"- {item}" for item in config.completion_criteria)
            prompt += f"\n\n## Completion criteria\n{criteria}"
        return prompt

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the table as a ``{version, tasks}`` document."""
        return {
            "version": "1.0",
            "tasks": {
                name: config.model_dump(mode="json", exclude={"name"})
                for name, config in self._configs.items()
            },
        }

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, task_name: object) -> bool:
        return task_name in self._configs
