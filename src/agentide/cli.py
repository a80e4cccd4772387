"""agentide command-line interface."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from agentide.backends import BaseChatBackend, create_backend
from agentide.config import ConfigError, load_config, save_config, user_config_dir
from agentide.config.schema import AgentIdeConfig
from agentide.core.agent.executor import format_report
from agentide.core.orchestrator import ChatOutcome
from agentide.core.state import AppState

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

app = typer.Typer(
    name="agentide",
    help="agentide - terminal IDE with an AI assistant that can act on your project",
    invoke_without_command=True,
    rich_markup_mode="rich",
)
console = Console()


def _configure_logging(verbose: bool, log_file: Path | None = None) -> None:
    if log_file is not None:
        # The TUI owns the terminal, so logs go to a file.
        log_file.parent.mkdir(parents=True, exist_ok=True)
        level = logging.DEBUG if verbose else logging.INFO
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=str(log_file))
    else:
        level = logging.DEBUG if verbose else logging.WARNING
        logging.basicConfig(level=level, format=LOG_FORMAT)


def _load_config_or_exit(config_path: Optional[Path]) -> AgentIdeConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(1)


def _resolve_root(root: Optional[Path]) -> Optional[Path]:
    if root is None:
        return None
    root = root.expanduser()
    if not root.is_dir():
        console.print(f"[red]Not a directory:[/red] {root}")
        raise typer.Exit(1)
    return root


def _build_backend(config: AgentIdeConfig) -> BaseChatBackend:
    return create_backend(config.backend)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a config TOML file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Launch the TUI by default when no command is specified."""
    ctx.obj = {"config_path": config_path, "verbose": verbose}
    if ctx.invoked_subcommand is None:
        _run_tui(config_path, verbose, None)


def _run_tui(config_path: Optional[Path], verbose: bool, root: Optional[Path]) -> None:
    _configure_logging(verbose, user_config_dir() / "agentide.log")
    config = _load_config_or_exit(config_path)
    project_root = _resolve_root(root)

    from agentide.ui.app import run

    run(config, project_root)


@app.command()
def tui(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Launch the terminal IDE."""
    opts = ctx.obj or {}
    _run_tui(opts.get("config_path"), opts.get("verbose", False), root)


@app.command()
def ask(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Question for the assistant"),
    agentic: bool = typer.Option(
        False, "--agentic", "-a", help="Execute actions found in the reply"
    ),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Ask a one-shot question."""
    opts = ctx.obj or {}
    _configure_logging(opts.get("verbose", False))
    config = _load_config_or_exit(opts.get("config_path"))
    project_root = _resolve_root(root)

    backend = _build_backend(config)
    outcome = asyncio.run(_ask(config, backend, message, agentic, project_root))

    if outcome is None or not outcome.ok:
        error = outcome.error if outcome else "no reply"
        console.print(f"[red]Request failed:[/red] {error}")
        raise typer.Exit(1)

    console.print(Panel(outcome.reply or "", title=backend.display_name, border_style="cyan"))
    for parse_error in outcome.parse_errors:
        console.print(f"[yellow]Skipped block:[/yellow] {parse_error}")
    if outcome.report is not None:
        style = "green" if outcome.report.failed == 0 else "yellow"
        console.print(Panel(format_report(outcome.report), title="Actions", border_style=style))
    elif agentic:
        console.print("[dim]No actions in reply.[/dim]")


async def _ask(
    config: AgentIdeConfig,
    backend: BaseChatBackend,
    message: str,
    agentic: bool,
    project_root: Optional[Path],
) -> Optional[ChatOutcome]:
    state = AppState.from_config(config, backend, project_root)
    if agentic:
        state.modes.toggle_agentic(state.focus.current)
    try:
        state.send_chat(message)
        outcome = await state.orchestrator.wait()
    finally:
        await backend.close()
    return outcome


@app.command("config")
def config_cmd(
    ctx: typer.Context,
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Backend API key"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name"),
    allow_commands: Optional[bool] = typer.Option(
        None, "--allow-commands/--no-allow-commands", help="Permit run_command actions"
    ),
    show: bool = typer.Option(False, "--show", help="Print the effective configuration"),
) -> None:
    """Update or show persisted settings."""
    opts = ctx.obj or {}
    config_path = opts.get("config_path")
    config = _load_config_or_exit(config_path)

    changed = False
    if api_key is not None:
        config.backend.api_key = api_key
        changed = True
    if model is not None:
        config.backend.model = model
        changed = True
    if allow_commands is not None:
        config.safety.allow_commands = allow_commands
        changed = True

    if changed:
        path = save_config(config, config_path)
        console.print(f"[green]Saved configuration to {path}[/green]")

    if show or not changed:
        _print_config(config)


def _print_config(config: AgentIdeConfig) -> None:
    table = Table(title="agentide configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    key = config.backend.resolve_api_key()
    table.add_row("backend.provider", config.backend.provider)
    table.add_row("backend.base_url", config.backend.base_url)
    table.add_row("backend.model", config.backend.model)
    table.add_row("backend.api_key", "set" if key else "[red]missing[/red]")
    table.add_row("safety.project_root", str(config.safety.project_root or "(cwd)"))
    table.add_row("safety.allow_commands", str(config.safety.allow_commands))
    table.add_row("safety.restricted_paths", ", ".join(config.safety.restricted_paths))
    table.add_row("ui.notification_capacity", str(config.ui.notification_capacity))
    table.add_row("conversation.max_history", str(config.conversation.max_history))
    console.print(table)


# --- Entry Point ---


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
