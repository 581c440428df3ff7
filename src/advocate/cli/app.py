"""Typer application for Advocate."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from advocate.bootstrap import Runtime, build_orchestrator, build_runtime
from advocate.cli.interactive import InteractiveCli
from advocate.cli.render import Renderer
from advocate.config import load_settings
from advocate.errors import CommandValidationError, MediaRejectedError
from advocate.logging_utils import configure_logging
from advocate.media import load_media_file
from advocate.store import LANGUAGE_OPTIONS, load_language, save_language

app = typer.Typer(
    name="advocate",
    help="Devil's Advocate: a conversational front end with voice-command shortcuts.",
    add_completion=False,
    rich_markup_mode="rich",
)
commands_app = typer.Typer(help="Manage custom commands.")
app.add_typer(commands_app, name="commands")

console = Console()


def _runtime(home: Path | None = None, model: str | None = None) -> Runtime:
    settings = load_settings(home=home, model=model)
    return build_runtime(settings)


@app.callback()
def main_callback() -> None:
    configure_logging()


@app.command()
def chat(
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
    model: str | None = typer.Option(None, "--model", "-m", help="provider:model override"),
) -> None:
    """Start an interactive conversation."""
    configure_logging(profile="chat")
    runtime = _runtime(home, model)
    asyncio.run(InteractiveCli(runtime).run())


@app.command()
def ask(
    text: str = typer.Argument(..., help="What to say"),
    media: Path | None = typer.Option(None, "--media", help="Image or video to attach"),  # noqa: B008
    lang: str | None = typer.Option(None, "--lang", help="Response language code"),
    share_url: str | None = typer.Option(None, "--share-url", help="Page URL to share as context"),
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Run one utterance through the conversation and print the reply."""
    runtime = _runtime(home)
    renderer = Renderer(console)
    try:
        orchestrator = build_orchestrator(runtime, notifier=renderer, language=lang)
    except ValueError as exc:
        renderer.error(str(exc))
        raise typer.Exit(1) from exc
    if share_url:
        orchestrator.set_share_url(True, share_url)
    if media is not None:
        try:
            orchestrator.attach_media(load_media_file(media))
        except MediaRejectedError as exc:
            renderer.error(str(exc))
            raise typer.Exit(1) from exc

    accepted = asyncio.run(orchestrator.submit(text))
    if not accepted:
        raise typer.Exit(1)
    for message in orchestrator.messages:
        if message.sender == "ai":
            renderer.message(message)


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Page URL"),
    context: str | None = typer.Option(None, "--context", help="Additional context"),
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Summarize a web page."""
    runtime = _runtime(home)
    summary = asyncio.run(runtime.flows.summarize(url, context))
    typer.echo(summary)


@app.command()
def status(
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Show the selected backend and the registered flows."""
    runtime = _runtime(home)
    Renderer(console).backend_status(runtime.selection)
    typer.echo(f"model: {runtime.settings.model}")
    typer.echo(f"flows: {', '.join(runtime.registry.names())}")


@app.command()
def language(
    code: str | None = typer.Argument(None, help="Two-letter language code to select"),
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Show or change the response language."""
    runtime = _runtime(home)
    if code is None:
        current = load_language(runtime.preferences)
        typer.echo(f"{current} ({LANGUAGE_OPTIONS[current]})")
        return
    try:
        selected = save_language(runtime.preferences, code)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"{selected} ({LANGUAGE_OPTIONS[selected]})")


@commands_app.command("list")
def list_commands(
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """List custom commands."""
    runtime = _runtime(home)
    commands = runtime.commands.all()
    if not commands:
        typer.echo("(no custom commands)")
        return
    table = Table("id", "phrase", "url")
    for command in commands:
        table.add_row(command.id, command.phrase, command.action_url)
    console.print(table)


@commands_app.command("add")
def add_command(
    phrase: str = typer.Argument(..., help="Trigger phrase"),
    url: str = typer.Argument(..., help="URL to open"),
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Register a custom command."""
    runtime = _runtime(home)
    try:
        command = runtime.commands.add(phrase, url)
    except CommandValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(f'Command "{command.phrase}" added ({command.id}).')


@commands_app.command("remove")
def remove_command(
    command_id: str = typer.Argument(..., help="Command id"),
    home: Path | None = typer.Option(None, "--home", help="State directory"),  # noqa: B008
) -> None:
    """Delete a custom command."""
    runtime = _runtime(home)
    try:
        command = runtime.commands.remove(command_id)
    except KeyError as exc:
        typer.echo(f"unknown command id: {command_id}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f'Command "{command.phrase}" removed.')
