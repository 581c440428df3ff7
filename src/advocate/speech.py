"""Output collaborators of the conversation: speech, notices and URL opening."""

from __future__ import annotations

import webbrowser
from dataclasses import dataclass
from typing import Literal, Protocol

from loguru import logger

from advocate.errors import RecognitionError, RecognitionErrorKind

NoticeVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notice:
    """User-visible toast-style notification."""

    title: str
    description: str
    variant: NoticeVariant = "default"


class Speaker(Protocol):
    async def speak(self, text: str, language: str) -> None: ...


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None: ...


class UrlOpener(Protocol):
    def open(self, url: str) -> None: ...


class SilentSpeaker:
    """Speech output that does nothing; used where no audio device exists."""

    async def speak(self, text: str, language: str) -> None:
        logger.debug("speech.skip language={} chars={}", language, len(text))


class LogNotifier:
    """Notices go to the log when there is no screen to show them on."""

    def notify(self, notice: Notice) -> None:
        log = logger.error if notice.variant == "destructive" else logger.info
        log("notice title={!r} description={!r}", notice.title, notice.description)


class BrowserOpener:
    """Opens command URLs in a new browser tab."""

    def open(self, url: str) -> None:
        if not webbrowser.open_new_tab(url):
            logger.warning("browser.open.unavailable url={}", url)


def recognition_notice(error: RecognitionError) -> Notice:
    """Categorized notice for a speech recognition failure."""
    if error.kind is RecognitionErrorKind.NOT_ALLOWED:
        return Notice(
            title="Microphone Access Denied",
            description="To use voice input, please allow microphone access in your browser settings.",
            variant="destructive",
        )
    if error.kind is RecognitionErrorKind.NO_SPEECH:
        return Notice(title="No Speech Detected", description="I didn't catch anything. Please try again.")
    if error.kind is RecognitionErrorKind.AUDIO_CAPTURE:
        return Notice(
            title="Microphone Unavailable",
            description="No microphone was found or it could not be started.",
            variant="destructive",
        )
    return Notice(title="Speech Error", description=f"Recognition error: {error.code}", variant="destructive")
