"""Application-level exception types for Advocate."""

from __future__ import annotations

from enum import Enum


class AdvocateError(Exception):
    """Base exception for Advocate."""


class ConfigurationError(AdvocateError):
    """Base exception for configuration and startup validation errors."""


class BackendInitError(ConfigurationError):
    """Raised when the live backend cannot be constructed."""


class DuplicateDefinitionError(AdvocateError):
    """Raised when a flow or prompt name is defined twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"flow or prompt already defined: {name}")
        self.name = name


class SynthesisError(AdvocateError):
    """Raised when no placeholder can be produced for a schema shape."""

    def __init__(self, shape: str) -> None:
        super().__init__(f"cannot synthesize a placeholder for schema shape: {shape}")
        self.shape = shape


class ValidationError(AdvocateError):
    """Raised when a value does not conform to a declared schema."""

    def __init__(self, message: str, *, path: str = "$", flow: str | None = None) -> None:
        prefix = f"{flow}: " if flow else ""
        super().__init__(f"{prefix}{message} at {path}")
        self.path = path
        self.flow = flow


class MediaRejectedError(AdvocateError):
    """Raised when an attachment is not an image or video data URI."""


class CommandValidationError(AdvocateError):
    """Raised when a custom command has an empty phrase or an invalid URL."""


class RecognitionErrorKind(str, Enum):
    NO_SPEECH = "no-speech"
    AUDIO_CAPTURE = "audio-capture"
    NOT_ALLOWED = "not-allowed"
    OTHER = "other"

    @classmethod
    def classify(cls, code: str) -> RecognitionErrorKind:
        normalized = code.strip().casefold()
        if normalized in {"not-allowed", "service-not-allowed"}:
            return cls.NOT_ALLOWED
        if normalized == "no-speech":
            return cls.NO_SPEECH
        if normalized == "audio-capture":
            return cls.AUDIO_CAPTURE
        return cls.OTHER


class RecognitionError(AdvocateError):
    """Speech recognition failure reported by the input device."""

    def __init__(self, code: str) -> None:
        super().__init__(f"recognition error: {code}")
        self.code = code
        self.kind = RecognitionErrorKind.classify(code)
