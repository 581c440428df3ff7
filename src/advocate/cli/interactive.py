"""Interactive chat loop."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from advocate.bootstrap import Runtime, build_orchestrator
from advocate.cli.render import Renderer
from advocate.errors import MediaRejectedError
from advocate.media import load_media_file, parse_data_uri
from advocate.orchestrator import ConversationOrchestrator
from advocate.speech import Notice

QUIT_WORDS = frozenset({"/quit", "/exit", "quit", "exit"})


class InteractiveCli:
    """Reads lines, dispatches slash commands and sends everything else."""

    def __init__(self, runtime: Runtime, renderer: Renderer | None = None) -> None:
        self._runtime = runtime
        self._renderer = renderer or Renderer()
        self.orchestrator: ConversationOrchestrator = build_orchestrator(runtime, notifier=self._renderer)
        self._shown = 0

    async def run(self) -> None:
        self._renderer.welcome()
        self._renderer.backend_status(self._runtime.selection)
        while True:
            try:
                line = await self._renderer.get_user_input(self._prompt())
            except (EOFError, KeyboardInterrupt):
                break
            if not await self.handle_line(line):
                break

    async def handle_line(self, line: str) -> bool:
        """Process one input line; False means the user asked to leave."""
        stripped = line.strip()
        if stripped.lower() in QUIT_WORDS:
            return False
        if stripped.startswith("/"):
            self._handle_slash(stripped)
            return True
        await self.orchestrator.submit(line)
        self._flush_messages()
        return True

    def _handle_slash(self, line: str) -> None:
        name, _, rest = line[1:].partition(" ")
        argument = rest.strip()
        if name == "attach":
            self._attach(argument)
        elif name == "detach":
            self.orchestrator.detach_media()
            self._renderer.info("[dim]Attachment removed.[/dim]")
        elif name == "lang":
            self._set_language(argument)
        elif name == "url":
            self._set_url(argument)
        elif name == "reset":
            self.orchestrator.reset()
            self._shown = 0
            self._renderer.info("[dim]Conversation cleared.[/dim]")
        else:
            self._renderer.error(f"unknown command: /{name}")

    def _attach(self, argument: str) -> None:
        if not argument:
            self._renderer.error("usage: /attach PATH")
            return
        try:
            if argument.startswith("data:"):
                attachment = parse_data_uri(argument)
            else:
                attachment = load_media_file(Path(argument).expanduser())
        except MediaRejectedError as exc:
            self._renderer.notify(Notice(title="Invalid File Type", description=str(exc), variant="destructive"))
            return
        if self.orchestrator.attach_media(attachment):
            self._renderer.info(f"[dim]Attached {attachment.kind} ({attachment.mime_type}).[/dim]")

    def _set_language(self, argument: str) -> None:
        try:
            code = self.orchestrator.set_language(argument)
        except ValueError as exc:
            self._renderer.error(str(exc))
            return
        self._renderer.info(f"[dim]Language set to {code}.[/dim]")

    def _set_url(self, argument: str) -> None:
        flag, _, url = argument.partition(" ")
        if flag not in {"on", "off"}:
            self._renderer.error("usage: /url on|off [URL]")
            return
        self.orchestrator.set_share_url(flag == "on", url.strip() or None)
        logger.debug("cli.share_url enabled={} url={}", self.orchestrator.share_url, self.orchestrator.page_url)
        self._renderer.info(f"[dim]Share URL {flag}.[/dim]")

    def _flush_messages(self) -> None:
        messages = self.orchestrator.messages
        for message in messages[self._shown :]:
            if message.sender == "ai":
                self._renderer.message(message)
        self._shown = len(messages)

    def _prompt(self) -> str:
        marker = "+media " if self.orchestrator.media is not None else ""
        return f"[{self.orchestrator.language}] {marker}> "
