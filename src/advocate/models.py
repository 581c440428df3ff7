"""Conversation data models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Sender = Literal["user", "ai"]


class CustomCommand(BaseModel):
    """User-defined phrase that opens a URL."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    phrase: str
    action_url: str = Field(alias="actionUrl")

    def to_record(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class InterpretationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: str = "unknown"
    parameters: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.0

    @classmethod
    def from_payload(cls, payload: Any) -> InterpretationResult:
        """Build from a flow output, tolerating a missing or malformed ``parameters``."""
        if not isinstance(payload, Mapping):
            return cls()
        parameters = payload.get("parameters")
        confidence = payload.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.0
        action = payload.get("action")
        return cls(
            action=action if isinstance(action, str) else "unknown",
            parameters=dict(parameters) if isinstance(parameters, Mapping) else {},
            confidence=float(confidence),
        )

    @property
    def matched_phrase(self) -> str | None:
        phrase = self.parameters.get("matchedPhrase")
        return phrase if isinstance(phrase, str) else None


class ConversationMessage(BaseModel):
    """One transcript entry; never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    sender: Sender
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
