"""One-shot backend selection at startup."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from advocate.backends.base import Backend, BackendKind
from advocate.backends.live import LiveBackend
from advocate.backends.noop import NoOpBackend
from advocate.config import Settings
from advocate.logging_utils import set_backend_label

MISSING_KEY_MESSAGE = (
    "GOOGLE_API_KEY or GEMINI_API_KEY is not set. Using the NoOp backend; AI features are disabled. "
    "Add your API key to the .env file and restart (example: GEMINI_API_KEY=your_api_key_here)."
)
INIT_FAILED_MESSAGE = (
    "Failed to initialize the live backend even though an API key was present. "
    "Using the NoOp backend; AI features are disabled. Error details: {error}. "
    "Check your API key and configuration, then restart."
)


@dataclass(frozen=True)
class StartupDiagnostic:
    """Why the process is running in degraded mode."""

    level: Literal["WARNING", "ERROR"]
    message: str


@dataclass(frozen=True)
class BackendSelection:
    """The process-wide backend choice; never changes after startup."""

    backend: Backend
    diagnostic: StartupDiagnostic | None = None

    @property
    def kind(self) -> BackendKind:
        return self.backend.kind

    @property
    def degraded(self) -> bool:
        return self.backend.kind == "noop"


def select_backend(
    settings: Settings,
    *,
    live_factory: Callable[[Settings], Backend] = LiveBackend,
) -> BackendSelection:
    """Pick the live backend when a credential is configured, else the NoOp backend.

    Never raises: a missing key or a failing live construction is recorded as a
    startup diagnostic and logged.
    """
    if not settings.resolved_api_key:
        diagnostic = StartupDiagnostic(level="WARNING", message=MISSING_KEY_MESSAGE)
        return _degraded(diagnostic)

    try:
        backend = live_factory(settings)
    except Exception as exc:
        diagnostic = StartupDiagnostic(level="ERROR", message=INIT_FAILED_MESSAGE.format(error=f"{exc!s}"))
        return _degraded(diagnostic)

    set_backend_label(backend.kind)
    logger.info("backend.select kind={} model={}", backend.kind, settings.model)
    return BackendSelection(backend=backend)


def _degraded(diagnostic: StartupDiagnostic) -> BackendSelection:
    set_backend_label("noop")
    logger.log(diagnostic.level, "backend.select kind=noop {}", diagnostic.message)
    return BackendSelection(backend=NoOpBackend(), diagnostic=diagnostic)
