"""Rich console UI for Sidekick CLI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style as PTStyle
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from sidekick.client.ollama_client import ModelInfo
from sidekick.executor.file_writer import WriteResult


class StreamDisplay:
    """
    Fragment callback that renders a streaming reply.

    Shows a spinner until the first fragment arrives, then a live panel
    that grows as fragments are appended.
    """

    def __init__(self, console: Console, title: str, spinner_message: str, markdown: bool = True):
        self.console = console
        self.title = title
        self.spinner_message = spinner_message
        self.markdown = markdown
        self.text = ""
        self._status = None
        self._live: Optional[Live] = None

    def __enter__(self) -> "StreamDisplay":
        self._status = self.console.status(f"[bold cyan]{self.spinner_message}[/]", spinner="dots")
        self._status.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self._stop_spinner()
        if self._live is not None:
            self._live.stop()
            self._live = None

    def __call__(self, fragment: str) -> None:
        if self._live is None:
            self._stop_spinner()
            self._live = Live(self._render(), console=self.console, refresh_per_second=8)
            self._live.start()
        self.text += fragment
        self._live.update(self._render())

    def _stop_spinner(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def _render(self) -> Panel:
        body = Markdown(self.text) if self.markdown else Text(self.text)
        return Panel(body, title=f"[bold green]{self.title}[/]", border_style="green")


class SidekickConsole:
    """Rich console for the Sidekick CLI."""

    BANNER = "[bold cyan]🦙 Sidekick[/] [dim]- local coding assistant for Ollama[/]"

    def __init__(self, history_path: Optional[Path] = None):
        self.console = Console()
        self.history_path = history_path
        self._prompt_session: Optional[PromptSession] = None

    def _get_prompt_session(self) -> PromptSession:
        # Created on first use so non-interactive commands never touch the terminal
        if self._prompt_session is None:
            history = InMemoryHistory()
            if self.history_path is not None:
                self.history_path.parent.mkdir(parents=True, exist_ok=True)
                history = FileHistory(str(self.history_path))
            self._prompt_session = PromptSession(
                history=history,
                style=PTStyle.from_dict({"prompt": "bold cyan"}),
                enable_history_search=True,
            )
        return self._prompt_session

    def print_banner(self, version: str, project_path: Path, host: str, mode: str):
        """Print the startup banner with project info."""
        self.console.print(self.BANNER)
        info_text = f"[dim]v{version}[/] │ [bold]{project_path.name}[/] │ [yellow]{host}[/] │ mode: [cyan]{mode}[/]"
        self.console.print(Panel(info_text, style="blue", padding=(0, 1)))

    def print_help(self, modes: Sequence[str]):
        """Print available slash commands."""
        help_text = f"""
[bold]Commands:[/]
  [cyan]/help[/]          Show this help message
  [cyan]/mode NAME[/]     Switch mode ({", ".join(modes)})
  [cyan]/add PATH[/]      Always include a file in the prompt
  [cyan]/drop PATH[/]     Stop including a file
  [cyan]/files[/]         List included files
  [cyan]/undo[/]          Restore the last file written
  [cyan]/clear[/]         Clear conversation history
  [cyan]/exit[/]          Exit Sidekick

[bold]Tips:[/]
  • Reference files by name: "explain src/main.py"
  • Edit mode rewrites the named file and keeps a [cyan].backup[/] copy
  • Agent mode creates files when asked to "create" them
"""
        self.console.print(Panel(help_text, title="[bold]Sidekick Help[/]", border_style="blue"))

    def thinking(self, message: str = "Thinking..."):
        """Return a spinner context for thinking state."""
        return self.console.status(f"[bold cyan]{message}[/]", spinner="dots")

    def stream(self, title: str, spinner_message: str = "Thinking...", markdown: bool = True) -> StreamDisplay:
        """Return a fragment callback that renders a streaming reply."""
        return StreamDisplay(self.console, title, spinner_message, markdown=markdown)

    def print_error(self, error: str, recoverable: bool = True):
        """Print an error message."""
        style = "yellow" if recoverable else "red"
        icon = "⚠" if recoverable else "✗"
        self.console.print(Text(f"{icon} {error}", style=style))

    def print_success(self, message: str):
        """Print a success message."""
        self.console.print(f"[green]✓ {message}[/green]")

    def print_info(self, message: str):
        """Print an info message."""
        self.console.print(f"[blue]ℹ {message}[/blue]")

    def print_warning(self, message: str):
        """Print a warning message."""
        self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_write_result(self, result: WriteResult, summary: str = ""):
        """Print the outcome of a file write."""
        if result.created:
            self.console.print(f"  [bold green]✓ Created:[/] {result.path} [dim]({result.bytes_written} bytes)[/]")
        else:
            self.console.print(
                f"  [bold green]✓ Modified:[/] {result.path} "
                f"[dim]({result.previous_size} → {result.bytes_written} bytes)[/]"
            )
        if summary:
            self.console.print(f"    {summary}")
        if result.backup_path:
            self.console.print(f"    [dim]Backup saved: {result.backup_path}[/]")

    def print_commands(self, commands: List[str]):
        """Print suggested shell commands. They are never executed."""
        body = Text("\n".join(commands), style="bold yellow")
        self.console.print(Panel(body, title="[bold]Commands (not executed)[/]", border_style="yellow"))

    def print_models(self, models: Sequence[ModelInfo], current: str = ""):
        """Print installed models as a table."""
        table = Table(title="Installed models", show_lines=False)
        table.add_column("Name", style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Modified", style="dim")
        for model in models:
            name = f"{model.name} [green]●[/]" if model.name == current else model.name
            table.add_row(name, model.human_size(), model.modified_at[:19])
        self.console.print(table)

    def print_files(self, files: Sequence[str]):
        """Print the files included in every prompt."""
        if not files:
            self.print_info("No files added")
            return
        for path in files:
            self.console.print(f"  📄 {path}")

    def prompt_input(self, label: str = "You") -> str:
        """
        Get user input with styled prompt.

        Up/Down arrows navigate history, Ctrl+R searches it.
        Ctrl+C returns an empty string; EOF propagates.
        """
        try:
            return self._get_prompt_session().prompt(f"{label}> ")
        except KeyboardInterrupt:
            return ""

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask for confirmation."""
        return Confirm.ask(message, console=self.console, default=default)

    def print_goodbye(self):
        """Print goodbye message."""
        self.console.print("\n[bold cyan]👋 Goodbye![/bold cyan]\n")
