from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from advocate.backends.base import Backend, BackendKind
from advocate.backends.selector import BackendSelection
from advocate.config import Settings
from advocate.types import FlowRunner, FlowSpec, Payload, PromptSpec

CREDENTIAL_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY", "ADVOCATE_API_KEY")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, home=tmp_path / "home")


class ScriptedBackend(Backend):
    """Live-kind backend whose flows answer from a script instead of running bodies."""

    kind: BackendKind = "live"

    def __init__(self, script: dict[str, list[Any]] | None = None) -> None:
        self.script: dict[str, list[Any]] = {name: list(items) for name, items in (script or {}).items()}
        self.calls: list[tuple[str, Payload]] = []

    def define_flow(self, spec: FlowSpec) -> FlowRunner:
        return self._runner(spec.name)

    def define_prompt(self, spec: PromptSpec) -> FlowRunner:
        return self._runner(spec.name)

    def calls_to(self, name: str) -> list[Payload]:
        return [payload for called, payload in self.calls if called == name]

    def _runner(self, name: str) -> FlowRunner:
        async def _run(payload: Payload) -> Any:
            self.calls.append((name, payload))
            queue = self.script.get(name)
            if not queue:
                raise AssertionError(f"unexpected call to {name}")
            item = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(item, BaseException):
                raise item
            if callable(item):
                return item(payload)
            return item

        return _run


@pytest.fixture
def scripted() -> Callable[[dict[str, list[Any]]], tuple[ScriptedBackend, BackendSelection]]:
    def _build(script: dict[str, list[Any]]) -> tuple[ScriptedBackend, BackendSelection]:
        backend = ScriptedBackend(script)
        return backend, BackendSelection(backend=backend)

    return _build
