"""CLI entry point for agent-session-context.

Invoked as::

    agent-session-context [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m agent_session_context.cli.main

Commands
--------
- version   — Show version information
- modes     — List the agent modes and their profiles
- tasks     — List task configurations (built-in or from a file)
- demo      — Run scripted turns against the offline dummy provider
- history   — Saved-history command group

History sub-commands
--------------------
- history show       — Display a saved history
- history summarize  — Write a priority-aware summary of a saved history
- history convert    — Convert a saved history between JSON and YAML
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agent_session_context.history.labeled_history import LabeledHistory
from agent_session_context.history.message import (
    HistoryFilter,
    LabeledMessage,
    MessageLabel,
    MessagePriority,
    SummaryOptions,
)
from agent_session_context.history.serializer import HistoryFormat, HistorySerializer
from agent_session_context.llm.types import TextBlock, ToolResult, ToolUseBlock

console = Console()

_LABEL_CHOICES = [label.value for label in MessageLabel]
_PRIORITY_CHOICES = [priority.value for priority in MessagePriority]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _format_for(path: Path) -> HistoryFormat:
    return "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"


def _load_history(path: Path) -> LabeledHistory:
    """Read a history file, exiting with status 1 on malformed input."""
    serializer = HistorySerializer()
    try:
        return serializer.deserialize(path.read_text(encoding="utf-8"), _format_for(path))
    except (ValueError, ValidationError, yaml.YAMLError) as exc:
        console.print(f"[red]Cannot read history {path}:[/red] {escape(str(exc))}")
        sys.exit(1)


def _render_content(message: LabeledMessage) -> str:
    if isinstance(message.content, str):
        return message.content
    parts: list[str] = []
    for block in message.content:
        if isinstance(block, TextBlock):
            parts.append(block.text)
        elif isinstance(block, ToolUseBlock):
            parts.append(f"-> {block.tool_use.name}({block.tool_use.input})")
        elif isinstance(block, ToolResult):
            parts.append(f"<- {block.content}")
    return "\n".join(parts)


_PRIORITY_STYLES = {
    MessagePriority.CRITICAL: "red",
    MessagePriority.HIGH: "yellow",
    MessagePriority.MEDIUM: "blue",
    MessagePriority.LOW: "dim",
}


def _print_messages(messages: list[LabeledMessage]) -> None:
    for message in messages:
        style = _PRIORITY_STYLES.get(message.priority, "white")
        header = (
            f"[{style}]{message.label.value}[/{style}] | {message.role} | "
            f"priority={message.priority.value} | tokens={message.metadata.token_count}"
        )
        if message.metadata.tags:
            header += f" | tags={escape(','.join(message.metadata.tags))}"
        console.print(Panel(Text(_render_content(message) or "(empty)"), title=header, expand=False))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="agent-session-context")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for library messages.",
)
def cli(log_level: str) -> None:
    """Mode, task-session and conversation-history management for agents"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from agent_session_context import __version__

    console.print(f"[bold]agent-session-context[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# modes
# ---------------------------------------------------------------------------


@cli.command(name="modes")
def modes_command() -> None:
    """List the agent modes and their profiles."""
    from agent_session_context.modes.profiles import DEFAULT_MODE, MODE_PROFILES

    table = Table(title="Agent modes", show_lines=True)
    table.add_column("Mode", style="bold cyan")
    table.add_column("Description")
    table.add_column("Write", justify="center")
    table.add_column("Max iterations", justify="right")
    table.add_column("Tools")

    for mode, profile in MODE_PROFILES.items():
        name = f"{mode.value} (default)" if mode is DEFAULT_MODE else mode.value
        table.add_row(
            name,
            profile.description,
            "yes" if profile.allow_file_write else "no",
            str(profile.max_iterations),
            ", ".join(profile.enabled_tools),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# tasks
# ---------------------------------------------------------------------------


@cli.command(name="tasks")
@click.option(
    "--config",
    "config_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON or YAML task configuration file. Defaults to the built-in tasks.",
)
def tasks_command(config_file: Path | None) -> None:
    """List task configurations."""
    from agent_session_context.tasks.config import TaskConfigTable

    if config_file is None:
        table_data = TaskConfigTable.default()
    else:
        try:
            table_data = TaskConfigTable.from_file(config_file)
        except (ValueError, ValidationError, yaml.YAMLError) as exc:
            console.print(f"[red]Invalid task configuration:[/red] {escape(str(exc))}")
            sys.exit(1)

    if not table_data.task_names():
        console.print("[yellow]No tasks configured.[/yellow]")
        return

    table = Table(title="Tasks", show_lines=True)
    table.add_column("Task", style="bold cyan")
    table.add_column("Name")
    table.add_column("Default mode", style="green")
    table.add_column("Tools")
    table.add_column("Phases")

    for name in table_data.task_names():
        config = table_data.get_config(name)
        table.add_row(
            name,
            config.display_name,
            config.default_mode.value,
            ", ".join(table_data.enabled_tools(name)),
            " -> ".join(config.phase_names()) or "-",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# demo
# ---------------------------------------------------------------------------


@cli.command(name="demo")
@click.argument("messages", nargs=-1, required=True)
@click.option(
    "--workspace",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the file tools may access.",
)
@click.option(
    "--save-history",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the base history to this file (JSON or YAML by suffix) afterwards.",
)
def demo_command(messages: tuple[str, ...], workspace: Path, save_history: Path | None) -> None:
    """Run one turn per MESSAGE against the offline dummy provider."""
    from agent_session_context.convenience import Agent

    agent = Agent(workspace=workspace)
    for text in messages:
        console.print(f"[bold]{escape(agent.prompt())} >[/bold] {escape(text)}")
        outcome = agent.ask(text)
        reply = outcome.last_response.text() if outcome.last_response is not None else ""
        if reply:
            console.print(f"[blue]{escape(reply)}[/blue]")
        if outcome.completed:
            console.print(f"[green]Completed:[/green] {escape(outcome.completion or '')}")
        console.print(f"[dim]{outcome.reason.value} after {outcome.iterations} call(s)[/dim]")

    if save_history is not None:
        serializer = HistorySerializer()
        save_history.parent.mkdir(parents=True, exist_ok=True)
        save_history.write_text(
            serializer.serialize(agent.context.base_history, _format_for(save_history)),
            encoding="utf-8",
        )
        console.print(f"[green]History saved:[/green] {save_history}")


# ---------------------------------------------------------------------------
# history command group
# ---------------------------------------------------------------------------


@cli.group(name="history")
def history_group() -> None:
    """Saved conversation-history commands."""


@history_group.command(name="show")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--label",
    "labels",
    multiple=True,
    type=click.Choice(_LABEL_CHOICES),
    help="Only show messages with this label (repeatable).",
)
@click.option("--limit", default=None, type=click.IntRange(min=0), help="Maximum messages to show.")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of formatted view.")
def history_show(
    history_file: Path,
    labels: tuple[str, ...],
    limit: int | None,
    json_output: bool,
) -> None:
    """Display the messages in HISTORY_FILE."""
    history = _load_history(history_file)
    messages = history.filter(HistoryFilter(labels=labels or None, limit=limit))

    if json_output:
        console.print_json(LabeledHistory(messages).to_json())
        return

    if not messages:
        console.print("[yellow]No messages.[/yellow]")
        return

    _print_messages(messages)
    console.print(
        f"\n[dim]Showing {len(messages)} of {len(history)} messages "
        f"({history.token_count()} estimated tokens).[/dim]"
    )


@history_group.command(name="summarize")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-messages", default=None, type=click.IntRange(min=1), help="Message budget.")
@click.option("--max-tokens", default=None, type=click.IntRange(min=1), help="Token budget.")
@click.option(
    "--preserve-label",
    "preserve_labels",
    multiple=True,
    type=click.Choice(_LABEL_CHOICES),
    help="Always keep messages with this label (repeatable).",
)
@click.option(
    "--preserve-priority",
    "preserve_priorities",
    multiple=True,
    type=click.Choice(_PRIORITY_CHOICES),
    help="Always keep messages with this priority (repeatable). Defaults to critical and high.",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the summary here (JSON or YAML by suffix) instead of printing it.",
)
def history_summarize(
    history_file: Path,
    max_messages: int | None,
    max_tokens: int | None,
    preserve_labels: tuple[str, ...],
    preserve_priorities: tuple[str, ...],
    output_file: Path | None,
) -> None:
    """Reduce HISTORY_FILE to a bounded, priority-aware summary."""
    history = _load_history(history_file)
    options = SummaryOptions(
        max_messages=max_messages,
        max_tokens=max_tokens,
        preserve_labels=frozenset(preserve_labels),
        **({"preserve_priorities": frozenset(preserve_priorities)} if preserve_priorities else {}),
    )
    summary = LabeledHistory(history.summarize(options))

    if output_file is None:
        _print_messages(summary.get_all())
        console.print(
            f"\n[dim]Kept {len(summary)} of {len(history)} messages "
            f"({summary.token_count()} estimated tokens).[/dim]"
        )
        return

    serializer = HistorySerializer()
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(
        serializer.serialize(summary, _format_for(output_file)), encoding="utf-8"
    )
    console.print(
        f"[green]Summary written ({len(summary)} of {len(history)} messages):[/green] {output_file}"
    )


@history_group.command(name="convert")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--to",
    "to_fmt",
    required=True,
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    help="Target format.",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file. Defaults to HISTORY_FILE with the target suffix.",
)
def history_convert(history_file: Path, to_fmt: str, output_file: Path | None) -> None:
    """Convert HISTORY_FILE between JSON and YAML."""
    history = _load_history(history_file)
    target: HistoryFormat = "yaml" if to_fmt.lower() == "yaml" else "json"
    destination = output_file or history_file.with_suffix(f".{target}")
    if destination.resolve() == history_file.resolve():
        console.print("[red]Refusing to overwrite the input file.[/red]")
        sys.exit(1)

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(HistorySerializer().serialize(history, target), encoding="utf-8")
    console.print(
        f"[green]Converted ({_format_for(history_file)} -> {target}):[/green] {destination}"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
