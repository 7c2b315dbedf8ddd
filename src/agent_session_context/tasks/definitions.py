"""Built-in task definitions.

``TaskConfigTable.default()`` registers these in the order of
``BUILTIN_TASKS``.
"""
from __future__ import annotations

from agent_session_context.modes.profiles import AgentMode
from agent_session_context.tasks.config import TaskConfig, TaskPhase

# Session management tools offered inside every built-in task and phase.
SESSION_CONTROL_TOOLS: tuple[str, ...] = (
    "start_session",
    "advance_phase",
    "get_phase_status",
    "add_artifact",
    "suspend_session",
    "resume_session",
    "complete_session",
    "list_sessions",
)

MULMO_TASK = TaskConfig(
    name="mulmo",
    display_name="MulmoScript authoring",
    description="Write a video script in MulmoScript format.",
    goal="A finished MulmoScript file",
    default_mode=AgentMode.IMPLEMENTATION,
    system_prompt=(
        "You are an expert MulmoScript author.\n"
        "\n"
        "## About MulmoScript\n"
        "- A JSON video-script format\n"
        "- The beats array defines the narration of each scene\n"
        "- Every beat has text (required), and optionally speaker and "
        "imagePrompt/moviePrompt\n"
        "\n"
        "## Steps\n"
        "1. Interview: find out exactly what the user wants\n"
        "2. Write: generate the script with createBeatsOnMulmoScript\n"
        "3. Check: validate it with validate_mulmo"
    ),
    enabled_core_tools=["read_file", "list_files"],
    enabled_task_tools=["createBeatsOnMulmoScript", "validate_mulmo", *SESSION_CONTROL_TOOLS],
    phases=[
        TaskPhase(
            name="planning",
            description="Interview and outline",
            goal="Understand the request and produce an outline",
            system_prompt=(
                "Interview the user about their request:\n"
                "- what kind of video they want\n"
                "- who the audience is\n"
                "- the preferred length and number of scenes\n"
                "- the preferred visual style and tone\n"
                "\n"
                "When the interview is done, present an outline."
            ),
            requires_approval=True,
            approval_prompt="Shall I write the MulmoScript from this outline?",
        ),
        TaskPhase(
            name="writing",
            description="Write the script",
            goal="A complete MulmoScript file",
            system_prompt=(
                "Always create the script with the createBeatsOnMulmoScript tool; "
                "it also saves the file, so do not use write_file.\n"
                "\n"
                "- Define each scene as a beat\n"
                "- Put the spoken narration in text\n"
                "- Write imagePrompt or moviePrompt in English"
            ),
            enabled_tools=["read_file", "createBeatsOnMulmoScript", *SESSION_CONTROL_TOOLS],
        ),
        TaskPhase(
            name="validation",
            description="Validate and fix",
            goal="An error-free script",
            system_prompt=(
                "Validate the script with validate_mulmo. If it needs fixing, "
                "recreate it with createBeatsOnMulmoScript."
            ),
            enabled_tools=[
                "read_file",
                "validate_mulmo",
                "createBeatsOnMulmoScript",
                *SESSION_CONTROL_TOOLS,
            ],
        ),
    ],
    completion_criteria=[
        "A MulmoScript file has been created",
        "The script validates without errors",
        "The script meets the user's request",
    ],
)

CODEGEN_TASK = TaskConfig(
    name="codegen",
    display_name="Code generation",
    description="Generate or modify code to the user's request.",
    goal="Working code",
    default_mode=AgentMode.IMPLEMENTATION,
    system_prompt=(
        "You are an expert programmer.\n"
        "\n"
        "## Principles\n"
        "- Write clean, readable code\n"
        "- Include appropriate error handling\n"
        "- Follow the existing code style\n"
        "- Add tests where needed\n"
        "\n"
        "## Steps\n"
        "1. Understand the requirements\n"
        "2. Read the existing code\n"
        "3. Implement\n"
        "4. Verify with tests"
    ),
    enabled_core_tools=["read_file", "write_file", "list_files", "shell"],
    enabled_task_tools=["run_tests", "lint_code", *SESSION_CONTROL_TOOLS],
    phases=[
        TaskPhase(
            name="analysis",
            description="Requirements analysis",
            goal="Decide on the implementation approach",
            system_prompt="Analyse the requirements and decide how to implement them.",
            enabled_tools=["read_file", "list_files", *SESSION_CONTROL_TOOLS],
        ),
        TaskPhase(
            name="implementation",
            description="Implementation",
            goal="Complete code",
            system_prompt="Implement the code following the chosen approach.",
        ),
        TaskPhase(
            name="testing",
            description="Test and fix",
            goal="Passing tests",
            system_prompt="Test the code and fix any problems you find.",
            enabled_tools=["read_file", "write_file", "shell", "run_tests", *SESSION_CONTROL_TOOLS],
        ),
    ],
    completion_criteria=[
        "The code has been written",
        "There are no syntax errors",
        "Tests pass (where applicable)",
    ],
)

DOCUMENT_TASK = TaskConfig(
    name="document",
    display_name="Documentation",
    description="Write documentation or a README.",
    goal="Finished documentation",
    default_mode=AgentMode.PLANNING,
    system_prompt=(
        "You are a technical writer.\n"
        "\n"
        "## Principles\n"
        "- Clear, concise prose\n"
        "- Sensible structure\n"
        "- Include code examples\n"
        "- Keep the audience in mind"
    ),
    enabled_core_tools=["read_file", "write_file", "list_files"],
    enabled_task_tools=list(SESSION_CONTROL_TOOLS),
    completion_criteria=[
        "The documentation has been written",
        "It contains the required information",
    ],
)

ANALYSIS_TASK = TaskConfig(
    name="analysis",
    display_name="Code analysis",
    description="Analyse a codebase and write a report.",
    goal="An analysis report",
    default_mode=AgentMode.EXPLORATION,
    system_prompt=(
        "You are an expert code analyst.\n"
        "\n"
        "## What to look at\n"
        "- Architecture\n"
        "- Code quality\n"
        "- Potential problems\n"
        "- Suggested improvements"
    ),
    enabled_core_tools=["read_file", "list_files"],
    enabled_task_tools=list(SESSION_CONTROL_TOOLS),
    completion_criteria=[
        "The analysis is complete",
        "A report has been written",
    ],
)

BUILTIN_TASKS: tuple[TaskConfig, ...] = (
    MULMO_TASK,
    CODEGEN_TASK,
    DOCUMENT_TASK,
    ANALYSIS_TASK,
)
