"""
Sidekick CLI - local AI coding assistant with rich terminal UI.

Prompts go to a locally hosted Ollama server; replies stream back to the
terminal. Edit and agent modes may write files inside the project
directory, always keeping a .backup of the previous version.

Usage:
    sidekick status                      # Check the Ollama server
    sidekick models                      # List installed models
    sidekick config --model llama3:8b    # Set the default model
    sidekick run --mode edit             # Interactive mode
    sidekick ask "what is a closure?"    # One-shot question
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler

from sidekick import __version__
from sidekick.client import OllamaClient
from sidekick.core.config import Config, get_config_dir, get_config_path, load_config
from sidekick.core.session import Session
from sidekick.errors import ConfigError, SidekickError
from sidekick.executor import BACKUP_SUFFIX, FileWriter
from sidekick.modes import MODES, Mode, get_mode
from sidekick.modes.base import save_session
from sidekick.ui import SidekickConsole

logger = logging.getLogger(__name__)

# Global console instance
console: Optional[SidekickConsole] = None


def get_console() -> SidekickConsole:
    """Get or create console instance."""
    global console
    if console is None:
        console = SidekickConsole(history_path=get_config_dir() / "history")
    return console


def setup_logging(ui: SidekickConsole, debug: bool) -> None:
    """Route log records through rich; DEBUG when verbose, else warnings only."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=ui.console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_config_or_exit(ui: SidekickConsole) -> Config:
    try:
        return load_config()
    except ConfigError as e:
        ui.print_error(str(e), recoverable=False)
        sys.exit(1)


def _make_client(config: Config) -> OllamaClient:
    return OllamaClient(
        config.ollama.host,
        model=config.ollama.model,
        timeout=config.ollama.timeout,
    )


def _connect_or_exit(ui: SidekickConsole, client: OllamaClient) -> None:
    """Fail fast before any interactive work when Ollama is not reachable."""
    with ui.thinking("Connecting to Ollama..."):
        try:
            client.check_connection()
        except SidekickError as e:
            ui.print_error(f"Cannot reach Ollama at {client.host}: {e}", recoverable=False)
            ui.console.print("Start it with: [cyan]ollama serve[/]")
            sys.exit(1)


def _ensure_default_model(ui: SidekickConsole, client: OllamaClient, config: Config) -> None:
    """On first run, pick the first installed model as the default."""
    if not config.is_first_run:
        return

    models = client.list_models()
    if not models:
        ui.print_error("No models installed.", recoverable=False)
        ui.console.print("Install one with: [cyan]ollama pull codellama:7b[/]")
        sys.exit(1)

    config.ollama.model = models[0].name
    client.set_model(config.ollama.model)
    config.save()
    ui.print_info(f"Using model {config.ollama.model} (change with: sidekick config --model NAME)")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="Sidekick")
@click.pass_context
def cli(ctx):
    """
    Sidekick - local AI coding assistant for Ollama.

    Quick start:
        ollama serve
        sidekick status
        sidekick run --mode ask
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.argument("instruction", required=False)
@click.option("--mode", "-m", "mode_name", default="ask", type=click.Choice(list(MODES)), help="Interaction mode")
@click.option("--project-dir", "-p", default=".", help="Project directory")
@click.option("--once", is_flag=True, help="Run single instruction and exit")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def run(
    instruction: Optional[str],
    mode_name: str,
    project_dir: str,
    once: bool,
    verbose: bool,
):
    """
    Run Sidekick interactively.

    Without instruction: starts interactive mode
    With instruction: runs it and enters interactive mode (use --once to exit)

    Examples:
        sidekick run                                   # Interactive ask mode
        sidekick run -m edit "add docstrings to app.py"
        sidekick run -m agent "create a hello.py script" --once
    """
    ui = get_console()
    config = _load_config_or_exit(ui)
    setup_logging(ui, verbose or config.ollama.debug)

    project_path = Path(project_dir).resolve()
    if not project_path.is_dir():
        ui.print_error(f"Project directory not found: {project_dir}", recoverable=False)
        sys.exit(1)

    with _make_client(config) as client:
        _connect_or_exit(ui, client)
        _ensure_default_model(ui, client, config)

        session = Session.load(str(project_path))
        writer = FileWriter(project_path)

        def build_mode(name: str) -> Mode:
            return get_mode(name)(client, session, config, ui, writer)

        mode = build_mode(mode_name)
        ui.print_banner(__version__, project_path, client.host, mode.name)

        if instruction:
            _run_input(ui, mode, instruction)
            if once:
                return

        ui.console.print(f"[dim]{mode.description}. Type /help for commands.[/dim]\n")

        while True:
            try:
                user_input = ui.prompt_input(mode.name).strip()
            except EOFError:
                ui.print_goodbye()
                break

            if not user_input:
                continue

            if user_input.lower() in ("exit", "quit", "q"):
                ui.print_goodbye()
                break

            if user_input.startswith("/"):
                command, _, arg = user_input.partition(" ")
                command = command.lower()
                arg = arg.strip()

                if command in ("/exit", "/quit", "/q"):
                    ui.print_goodbye()
                    break

                if command == "/mode":
                    if arg not in MODES:
                        ui.print_warning(f"Modes: {', '.join(MODES)}")
                        continue
                    mode = build_mode(arg)
                    ui.print_success(f"Switched to {mode.name} mode: {mode.description}")
                    continue

                _handle_slash_command(ui, session, writer, command, arg)
                continue

            _run_input(ui, mode, user_input)


def _run_input(ui: SidekickConsole, mode: Mode, text: str) -> None:
    """Process one input, reporting failures without leaving the loop."""
    try:
        mode.process_input(text)
    except SidekickError as e:
        ui.print_error(str(e))
    except KeyboardInterrupt:
        ui.console.print("\n[yellow]Interrupted[/]")


def _handle_slash_command(
    ui: SidekickConsole,
    session: Session,
    writer: FileWriter,
    command: str,
    arg: str,
) -> None:
    """Handle slash commands other than /mode and /exit."""
    if command in ("/help", "/h", "/?"):
        ui.print_help(list(MODES))
    elif command == "/clear":
        session.clear_history()
        if save_session(session, ui):
            ui.print_success("Conversation history cleared")
    elif command == "/files":
        ui.print_files(session.active_files)
    elif command == "/add" and arg:
        session.add_file(arg)
        ui.print_success(f"Added {arg}")
    elif command == "/drop" and arg:
        session.remove_file(arg)
        ui.print_success(f"Dropped {arg}")
    elif command == "/undo":
        try:
            restored = writer.undo_last()
        except SidekickError as e:
            ui.print_error(str(e))
            return
        if restored:
            ui.print_success(f"Restored {restored.path}")
        else:
            ui.print_info("Nothing to undo")
    else:
        ui.print_warning(f"Unknown command: {command}. Type /help for commands.")


@cli.command()
@click.argument("query", required=True)
@click.option("--project-dir", "-p", default=".", help="Project directory")
def ask(query: str, project_dir: str):
    """Quick question without touching files or the saved session."""
    ui = get_console()
    config = _load_config_or_exit(ui)
    setup_logging(ui, config.ollama.debug)
    project_path = Path(project_dir).resolve()

    with _make_client(config) as client:
        session = Session(project_root=str(project_path))
        mode = get_mode("ask")(client, session, config, ui, FileWriter(project_path), persist=False)
        try:
            mode.process_input(query)
        except SidekickError as e:
            ui.print_error(str(e), recoverable=False)
            sys.exit(1)


@cli.command()
def models():
    """List models installed on the Ollama server."""
    ui = get_console()
    config = _load_config_or_exit(ui)

    with _make_client(config) as client:
        try:
            installed = client.list_models()
        except SidekickError as e:
            ui.print_error(str(e), recoverable=False)
            sys.exit(1)

    if not installed:
        ui.print_info("No models installed. Run: ollama pull codellama:7b")
        return
    ui.print_models(installed, current=config.ollama.model)


@cli.command()
def status():
    """Show Sidekick status and configuration."""
    ui = get_console()
    config = _load_config_or_exit(ui)

    ui.console.print(f"\n[bold cyan]Sidekick[/] v{__version__}")
    ui.console.print("─" * 40)
    ui.console.print(f"[dim]Config:[/]  {get_config_path()}")
    ui.console.print(f"[dim]Host:[/]    {config.ollama.host}")
    ui.console.print(f"[dim]Model:[/]   {config.ollama.model or '[red]not set[/]'}")
    for mode_name in MODES:
        override = getattr(config.models, mode_name, "")
        if override:
            ui.console.print(f"[dim]  {mode_name}:[/] {override}")

    ui.console.print()
    with _make_client(config) as client:
        with ui.thinking("Testing connection..."):
            try:
                installed = client.list_models()
            except SidekickError as e:
                ui.print_error(f"Cannot connect: {e}")
                installed = None
        if installed is not None:
            ui.print_success(f"Ollama connected ({len(installed)} model(s) installed)")

    ui.console.print()


@cli.command()
@click.option("--host", "-H", help="Set the Ollama host URL")
@click.option("--model", "-m", help="Set the default model")
@click.option("--temperature", "-t", type=float, help="Set the sampling temperature")
@click.option("--mode-model", nargs=2, multiple=True, metavar="MODE MODEL", help="Set the model for one mode")
@click.option("--show", is_flag=True, help="Show current configuration")
def config(host: str, model: str, temperature: float, mode_model, show: bool):
    """
    Configure Sidekick settings.

    Examples:
        sidekick config --model llama3:8b
        sidekick config --mode-model edit deepseek-coder:6.7b
        sidekick config --show
    """
    ui = get_console()
    cfg = _load_config_or_exit(ui)

    if show:
        ui.console.print(f"\n[bold]Sidekick Configuration[/] ({get_config_path()})")
        ui.console.print("─" * 50)
        ui.console.print(f"Host:          {cfg.ollama.host}")
        ui.console.print(f"Model:         {cfg.ollama.model or '[red]✗ not set[/]'}")
        ui.console.print(f"Temperature:   {cfg.ollama.temperature}")
        ui.console.print(f"Debug:         {cfg.ollama.debug}")
        for mode_name in MODES:
            ui.console.print(f"  {mode_name:<12}{getattr(cfg.models, mode_name) or '[dim]default[/]'}")
        ui.console.print()
        return

    changed = False
    if host:
        cfg.ollama.host = host.rstrip("/")
        changed = True
    if model:
        cfg.ollama.model = model
        changed = True
    if temperature is not None:
        if not 0.0 <= temperature <= 2.0:
            ui.print_error("Temperature must be between 0.0 and 2.0", recoverable=False)
            sys.exit(1)
        cfg.ollama.temperature = temperature
        changed = True
    for mode_name, mode_model_name in mode_model:
        if mode_name not in MODES:
            ui.print_error(f"Unknown mode '{mode_name}'. Choose from: {', '.join(MODES)}", recoverable=False)
            sys.exit(1)
        setattr(cfg.models, mode_name, mode_model_name)
        changed = True

    if not changed:
        ui.print_info("No configuration changes made. Use --help to see options.")
        return

    path = cfg.save()
    ui.print_success(f"Configuration saved to {path}")


@cli.command()
@click.option("--project-dir", "-p", default=".", help="Project directory")
@click.option("--force", "-f", is_flag=True, help="Don't ask for confirmation")
def clean(project_dir: str, force: bool):
    """Remove .backup files left by edits in the project."""
    ui = get_console()
    project_path = Path(project_dir).resolve()
    backups = sorted(project_path.rglob(f"*{BACKUP_SUFFIX}"))
    backups = [b for b in backups if b.is_file()]

    if not backups:
        ui.print_info("No backups to clean.")
        return

    for backup in backups:
        ui.console.print(f"  [dim]{backup.relative_to(project_path)}[/]")
    if not force and not ui.confirm(f"Remove {len(backups)} backup file(s)?"):
        return

    for backup in backups:
        backup.unlink()
    ui.print_success(f"Removed {len(backups)} backup file(s)")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
