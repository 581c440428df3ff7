"""Runtime bootstrap helpers."""

from __future__ import annotations

from dataclasses import dataclass

from advocate.backends.selector import BackendSelection, select_backend
from advocate.commands import CommandBook
from advocate.config import Settings
from advocate.flows import Flows, Registry, build_flows
from advocate.orchestrator import ConversationOrchestrator
from advocate.speech import Notifier, Speaker, UrlOpener
from advocate.store import FileStore, KeyValueStore, load_language, normalize_language


@dataclass(frozen=True)
class Runtime:
    """Process-wide pieces built once at startup."""

    settings: Settings
    selection: BackendSelection
    registry: Registry
    flows: Flows
    preferences: KeyValueStore
    commands: CommandBook


def build_runtime(
    settings: Settings,
    *,
    selection: BackendSelection | None = None,
    preferences: KeyValueStore | None = None,
) -> Runtime:
    """Select the backend, then declare the flows on it."""
    selection = selection or select_backend(settings)
    registry = Registry(selection)
    flows = build_flows(registry)
    preferences = preferences if preferences is not None else FileStore.in_home(settings.resolve_home())
    return Runtime(
        settings=settings,
        selection=selection,
        registry=registry,
        flows=flows,
        preferences=preferences,
        commands=CommandBook(preferences),
    )


def build_orchestrator(
    runtime: Runtime,
    *,
    speaker: Speaker | None = None,
    notifier: Notifier | None = None,
    opener: UrlOpener | None = None,
    language: str | None = None,
) -> ConversationOrchestrator:
    """One conversation session over ``runtime``."""
    orchestrator = ConversationOrchestrator(
        runtime.flows,
        runtime.commands,
        speaker=speaker,
        notifier=notifier,
        opener=opener,
        preferences=runtime.preferences,
        language=load_language(runtime.preferences),
        share_url=runtime.settings.share_url,
        page_url=runtime.settings.page_url,
        speak_responses=runtime.settings.speak_responses,
    )
    if language:
        # applies to this session only, not persisted
        orchestrator.language = normalize_language(language)
    return orchestrator
