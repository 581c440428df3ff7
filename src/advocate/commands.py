"""Custom voice commands and the interpretation policy around them."""

from __future__ import annotations

import json
import time
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import urlparse

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from advocate.errors import CommandValidationError
from advocate.flows.catalog import Flows
from advocate.models import CustomCommand, InterpretationResult
from advocate.store import COMMANDS_KEY, KeyValueStore

CONFIDENCE_THRESHOLD = 0.7


class CommandBook:
    """Ordered custom commands backed by a key-value store, saved on every change."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._commands: list[CustomCommand] = self._load()

    def all(self) -> list[CustomCommand]:
        return list(self._commands)

    def get(self, command_id: str) -> CustomCommand | None:
        return next((command for command in self._commands if command.id == command_id), None)

    def add(self, phrase: str, action_url: str) -> CustomCommand:
        command = CustomCommand(
            id=self._next_id(),
            phrase=_require_phrase(phrase),
            action_url=_require_url(action_url),
        )
        self._commands.append(command)
        self._save()
        logger.info("commands.add id={} phrase={!r}", command.id, command.phrase)
        return command

    def update(self, command_id: str, *, phrase: str | None = None, action_url: str | None = None) -> CustomCommand:
        for index, command in enumerate(self._commands):
            if command.id != command_id:
                continue
            updated = command.model_copy(
                update={
                    "phrase": _require_phrase(phrase) if phrase is not None else command.phrase,
                    "action_url": _require_url(action_url) if action_url is not None else command.action_url,
                }
            )
            self._commands[index] = updated
            self._save()
            return updated
        raise KeyError(command_id)

    def remove(self, command_id: str) -> CustomCommand:
        command = self.get(command_id)
        if command is None:
            raise KeyError(command_id)
        self._commands.remove(command)
        self._save()
        logger.info("commands.remove id={}", command_id)
        return command

    def to_context(self) -> str:
        """Serialize the command set for the interpretation prompt."""
        return json.dumps([command.to_record() for command in self._commands], ensure_ascii=False)

    def _load(self) -> list[CustomCommand]:
        raw = self._store.get(COMMANDS_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise TypeError("expected a list of commands")
            return [CustomCommand.model_validate(record) for record in records]
        except (json.JSONDecodeError, TypeError, PydanticValidationError) as exc:
            logger.error("commands.load.malformed error={}", exc)
            self._store.remove(COMMANDS_KEY)
            return []

    def _save(self) -> None:
        self._store.set(COMMANDS_KEY, self.to_context())

    def _next_id(self) -> str:
        candidate = int(time.time() * 1000)
        taken = {command.id for command in self._commands}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)


def _require_phrase(phrase: str) -> str:
    stripped = phrase.strip()
    if not stripped:
        raise CommandValidationError("Phrase cannot be empty.")
    return stripped


def _require_url(action_url: str) -> str:
    stripped = action_url.strip()
    if not stripped:
        raise CommandValidationError("Action URL cannot be empty.")
    parsed = urlparse(stripped)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise CommandValidationError(f"Invalid URL: {stripped}")
    return stripped


def resolve_command(
    commands: Sequence[CustomCommand],
    utterance: str,
    matched_phrase: str | None = None,
) -> CustomCommand | None:
    """First command whose phrase equals the utterance or the matched phrase, ignoring case and padding."""
    candidates = {utterance.strip().casefold()}
    if matched_phrase:
        candidates.add(matched_phrase.strip().casefold())
    matches = [command for command in commands if command.phrase.strip().casefold() in candidates]
    if not matches:
        return None
    if len(matches) > 1:
        logger.debug(
            "commands.resolve.ambiguous chosen={} shadowed={}",
            matches[0].id,
            [command.id for command in matches[1:]],
        )
    return matches[0]


@dataclass(frozen=True)
class CommandDecision:
    """Outcome of interpreting one utterance."""

    result: InterpretationResult
    command: CustomCommand | None = None

    @property
    def execute(self) -> bool:
        return self.command is not None


class CommandInterpreter:
    """Decides between running a custom command and open-ended generation."""

    def __init__(self, flows: Flows, *, threshold: float = CONFIDENCE_THRESHOLD) -> None:
        self._flows = flows
        self._threshold = threshold

    async def interpret(self, utterance: str, commands: Sequence[CustomCommand]) -> InterpretationResult:
        context = json.dumps([command.to_record() for command in commands], ensure_ascii=False)
        return await self._flows.interpret(utterance, context=context)

    async def decide(self, utterance: str, commands: Sequence[CustomCommand]) -> CommandDecision:
        result = await self.interpret(utterance, commands)
        if result.action == "unknown" or not result.confidence > self._threshold:
            logger.debug("commands.decide.fallthrough action={} confidence={}", result.action, result.confidence)
            return CommandDecision(result=result)
        command = resolve_command(commands, utterance, result.matched_phrase)
        return CommandDecision(result=result, command=command)
