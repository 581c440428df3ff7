"""Conversation controller: utterance -> command check -> response -> speech."""

from __future__ import annotations

import uuid
from enum import Enum

from loguru import logger

from advocate.commands import CommandBook, CommandInterpreter
from advocate.errors import RecognitionError
from advocate.flows.catalog import Flows
from advocate.media import MediaAttachment
from advocate.models import ConversationMessage, CustomCommand, Sender
from advocate.speech import (
    BrowserOpener,
    LogNotifier,
    Notice,
    Notifier,
    SilentSpeaker,
    Speaker,
    UrlOpener,
    recognition_notice,
)
from advocate.store import KeyValueStore, normalize_language, save_language

STATIC_APOLOGY = "I've encountered an unexpected issue and can't process that right now. Please try again later."
UNKNOWN_ERROR = "An unknown error occurred with the AI."
ACKNOWLEDGE_QUERY = "Acknowledge command execution."
EXPLAIN_ERROR_QUERY = "Explain that an error happened, in a simple way."


class Phase(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    COMMAND_CHECK = "command_check"
    COMMAND_EXEC = "command_exec"
    RESPONSE_GEN = "response_gen"


class ConversationOrchestrator:
    """Single-session state machine.

    At most one sending cycle runs at a time, and recording and sending exclude
    each other. Backend failures never escape: the primary response call falls
    back to an error-explanation call and then to a static apology.
    """

    def __init__(
        self,
        flows: Flows,
        commands: CommandBook,
        *,
        speaker: Speaker | None = None,
        notifier: Notifier | None = None,
        opener: UrlOpener | None = None,
        preferences: KeyValueStore | None = None,
        language: str = "en",
        share_url: bool = False,
        page_url: str | None = None,
        speak_responses: bool = True,
    ) -> None:
        self._flows = flows
        self._commands = commands
        self._interpreter = CommandInterpreter(flows)
        self._speaker = speaker or SilentSpeaker()
        self._notifier = notifier or LogNotifier()
        self._opener = opener or BrowserOpener()
        self._preferences = preferences
        self._messages: list[ConversationMessage] = []
        self.language = language
        self.share_url = share_url
        self.page_url = page_url
        self.speak_responses = speak_responses
        self.phase = Phase.IDLE
        self.recording = False
        self.media: MediaAttachment | None = None
        self.input_text = ""

    @property
    def messages(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    @property
    def is_loading(self) -> bool:
        return self.phase is not Phase.IDLE

    @property
    def input_enabled(self) -> bool:
        return not self.is_loading and not self.recording

    # Session settings

    def set_language(self, code: str) -> str:
        """Change the language for subsequent requests; in-flight ones keep theirs."""
        normalized = normalize_language(code)
        if self._preferences is not None:
            save_language(self._preferences, normalized)
        self.language = normalized
        return normalized

    def set_share_url(self, enabled: bool, page_url: str | None = None) -> None:
        self.share_url = enabled
        if page_url is not None:
            self.page_url = page_url

    def attach_media(self, attachment: MediaAttachment) -> bool:
        if not self.input_enabled:
            return False
        self.media = attachment
        logger.info("conversation.media.attach kind={} mime={}", attachment.kind, attachment.mime_type)
        return True

    def detach_media(self) -> bool:
        if not self.input_enabled:
            return False
        self.media = None
        return True

    def reset(self) -> bool:
        """Clear the transcript; refused while a cycle is in flight."""
        if self.is_loading:
            return False
        self._messages.clear()
        self.media = None
        self.input_text = ""
        return True

    # Sending

    async def submit(self, text: str | None = None) -> bool:
        """Send typed text (or the current input field) with any attached media.

        Returns False when the submission was not accepted.
        """
        raw = self.input_text if text is None else text
        if not self.input_enabled:
            logger.debug("conversation.submit.rejected phase={} recording={}", self.phase.value, self.recording)
            return False
        if not raw.strip() and self.media is None:
            return False
        if self.media is not None and not raw.strip():
            self._notify(
                Notice(title="Query Required", description="Please type a question or comment about the uploaded media.")
            )
            return False

        self._append(raw, "user")
        self.input_text = ""
        await self._run_cycle(raw)
        return True

    async def _run_cycle(self, text: str) -> None:
        self.phase = Phase.SENDING
        language = self.language
        media = self.media
        context = self._compose_context(text)
        try:
            self.phase = Phase.COMMAND_CHECK
            decision = await self._interpreter.decide(text, self._commands.all())
            if decision.command is not None:
                self.phase = Phase.COMMAND_EXEC
                await self._execute_command(decision.command, language)
                return

            self.phase = Phase.RESPONSE_GEN
            reply = await self._flows.respond(
                context=context,
                query=text,
                language=language,
                media_data_uri=media.data_uri if media is not None else None,
            )
            await self._reply(reply, language)
        except Exception as exc:
            await self._recover(exc, language)
        finally:
            self.media = None
            self.phase = Phase.IDLE

    def _compose_context(self, text: str) -> str:
        if self.share_url and self.page_url:
            return f"Current page context: {self.page_url}. User query: {text}"
        return text

    async def _execute_command(self, command: CustomCommand, language: str) -> None:
        logger.info("conversation.command.execute id={} url={}", command.id, command.action_url)
        self._opener.open(command.action_url)
        reply = await self._flows.respond(
            context=f'User executed a custom command: "{command.phrase}" which opens {command.action_url}',
            query=ACKNOWLEDGE_QUERY,
            language=language,
        )
        await self._reply(reply, language)

    async def _recover(self, exc: Exception, language: str) -> None:
        message = str(exc) or UNKNOWN_ERROR
        logger.opt(exception=exc).error("conversation.response.error error={}", message)
        try:
            reply = await self._flows.respond(
                context=f"An error occurred: {message}",
                query=EXPLAIN_ERROR_QUERY,
                language=language,
            )
        except Exception:
            logger.exception("conversation.recovery.error")
            self._append(STATIC_APOLOGY, "ai")
            self._notify(Notice(title="AI Error", description=message, variant="destructive"))
            return
        await self._reply(reply, language)

    async def _reply(self, text: str, language: str) -> None:
        self._append(text, "ai")
        if self.speak_responses:
            await self._speak(text, language)

    async def _speak(self, text: str, language: str) -> None:
        if not text:
            return
        try:
            await self._speaker.speak(text, language)
        except Exception:
            logger.exception("speech.output.error")
            self._notify(Notice(title="Speech Error", description="Could not play audio response.", variant="destructive"))

    # Recording

    def start_recording(self) -> bool:
        if not self.input_enabled:
            return False
        self.recording = True
        self.input_text = ""
        logger.debug("conversation.recording.start language={}", self.language)
        return True

    def on_interim(self, text: str) -> None:
        if self.recording:
            self.input_text = text

    async def on_final(self, transcript: str) -> bool:
        """A finalized transcript ends recording and is sent right away."""
        if not self.recording:
            return False
        self.recording = False
        self.input_text = ""
        if not transcript.strip():
            return False
        self._append(transcript, "user")
        await self._run_cycle(transcript)
        return True

    def stop_recording(self) -> None:
        """Explicit stop; interim text is discarded."""
        if self.recording:
            self.recording = False
            self.input_text = ""

    def on_speech_end(self) -> None:
        self.recording = False

    def on_recognition_error(self, code: str) -> RecognitionError:
        error = RecognitionError(code)
        self.recording = False
        self.input_text = ""
        logger.warning("conversation.recording.error code={} kind={}", code, error.kind.value)
        self._notify(recognition_notice(error))
        return error

    # Helpers

    def _append(self, text: str, sender: Sender) -> ConversationMessage:
        message = ConversationMessage(id=uuid.uuid4().hex, text=text, sender=sender)
        self._messages.append(message)
        return message

    def _notify(self, notice: Notice) -> None:
        try:
            self._notifier.notify(notice)
        except Exception:
            logger.exception("conversation.notify.error title={}", notice.title)
