import io

import pytest
from rich.console import Console

from advocate.bootstrap import build_runtime
from advocate.cli.interactive import InteractiveCli
from advocate.cli.render import Renderer
from advocate.config import Settings
from advocate.store import MemoryStore


def _cli(settings: Settings) -> tuple[InteractiveCli, io.StringIO]:
    buffer = io.StringIO()
    renderer = Renderer(Console(file=buffer, width=200))
    runtime = build_runtime(settings, preferences=MemoryStore())
    return InteractiveCli(runtime, renderer), buffer


@pytest.mark.asyncio
async def test_quit_words_end_the_session(settings: Settings) -> None:
    cli, _ = _cli(settings)
    assert await cli.handle_line("/quit") is False
    assert await cli.handle_line("exit") is False


@pytest.mark.asyncio
async def test_plain_line_prints_ai_reply(settings: Settings) -> None:
    cli, buffer = _cli(settings)

    assert await cli.handle_line("the moon landing was staged") is True

    assert "AI functionality is currently disabled" in buffer.getvalue()
    assert len(cli.orchestrator.messages) == 2


@pytest.mark.asyncio
async def test_lang_command_switches_language(settings: Settings) -> None:
    cli, buffer = _cli(settings)

    await cli.handle_line("/lang es")
    assert cli.orchestrator.language == "es"
    assert cli._prompt().startswith("[es]")

    await cli.handle_line("/lang zz")
    assert "unsupported language" in buffer.getvalue()
    assert cli.orchestrator.language == "es"


@pytest.mark.asyncio
async def test_url_command_toggles_sharing(settings: Settings) -> None:
    cli, _ = _cli(settings)

    await cli.handle_line("/url on https://example.com/post")
    assert cli.orchestrator.share_url is True
    assert cli.orchestrator.page_url == "https://example.com/post"

    await cli.handle_line("/url off")
    assert cli.orchestrator.share_url is False


@pytest.mark.asyncio
async def test_attach_rejects_non_media(settings: Settings, tmp_path) -> None:
    document = tmp_path / "notes.txt"
    document.write_text("hello", encoding="utf-8")
    cli, buffer = _cli(settings)

    await cli.handle_line(f"/attach {document}")

    assert "Invalid File Type" in buffer.getvalue()
    assert cli.orchestrator.media is None


@pytest.mark.asyncio
async def test_attach_then_detach(settings: Settings) -> None:
    cli, _ = _cli(settings)

    await cli.handle_line("/attach data:image/png;base64,iVBORw==")
    assert cli.orchestrator.media is not None
    assert "+media" in cli._prompt()

    await cli.handle_line("/detach")
    assert cli.orchestrator.media is None


@pytest.mark.asyncio
async def test_unknown_slash_command_is_reported(settings: Settings) -> None:
    cli, buffer = _cli(settings)
    assert await cli.handle_line("/dance") is True
    assert "unknown command: /dance" in buffer.getvalue()
