"""CLI renderer for Advocate."""

import threading

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape

from advocate.backends.selector import BackendSelection
from advocate.models import ConversationMessage
from advocate.speech import Notice


class Renderer:
    """CLI renderer using Rich for terminal output; also the session's notifier."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()

    def welcome(self, message: str = "[bold red]Devil's Advocate[/bold red] - challenge me or ask anything.") -> None:
        self._print(message)
        self._print("[dim]/attach PATH, /detach, /lang CODE, /url on|off [URL], /reset, /quit[/dim]")

    def backend_status(self, selection: BackendSelection) -> None:
        """Render which backend is active and why."""
        if selection.diagnostic is None:
            self._print(f"[bold]Backend:[/bold] [green]{selection.kind}[/green]")
            return
        style = "red" if selection.diagnostic.level == "ERROR" else "yellow"
        self._print(f"[bold]Backend:[/bold] [{style}]{selection.kind}[/{style}]")
        self._print(f"[{style}]{escape(selection.diagnostic.message)}[/{style}]")

    def message(self, message: ConversationMessage) -> None:
        if message.sender == "user":
            self._print(f"[bold cyan]You:[/bold cyan] {escape(message.text)}")
        else:
            self._print(f"[bold red]Advocate:[/bold red] {escape(message.text)}")

    def info(self, message: str) -> None:
        self._print(message)

    def error(self, message: str) -> None:
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def notify(self, notice: Notice) -> None:
        style = "bold red" if notice.variant == "destructive" else "bold yellow"
        self._print(f"[{style}]{escape(notice.title)}:[/{style}] {escape(notice.description)}")

    async def get_user_input(self, prompt: str = "> ") -> str:
        """Prompt user for input."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async(prompt)

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)
