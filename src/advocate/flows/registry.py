"""Flow and prompt registry bound to the selected backend."""

from __future__ import annotations

import builtins
import json
import re
import time
from typing import Any

from loguru import logger

from advocate.backends.selector import BackendSelection
from advocate.errors import DuplicateDefinitionError
from advocate.schema import check, validate
from advocate.types import FlowRunner, FlowSpec, Payload, PromptSpec

DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)
SENSITIVE_KEY_RE = re.compile(r"(key|token|secret|password)", re.IGNORECASE)


def _shorten_text(text: str, width: int = 80, placeholder: str = "...") -> str:
    """Shorten text to width characters, cutting in the middle of words if needed."""
    if len(text) <= width:
        return text

    available = width - len(placeholder)
    if available <= 0:
        return placeholder

    return text[:available] + placeholder


def redact(value: Any, *, key: str | None = None) -> Any:
    """Return a log-safe copy of a flow payload."""
    if key is not None and SENSITIVE_KEY_RE.search(key) and value not in (None, ""):
        return "***"
    if isinstance(value, dict):
        return {item_key: redact(item, key=str(item_key)) for item_key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    if isinstance(value, str):
        if match := DATA_URI_RE.match(value):
            mime = match.group("mime") or "unknown"
            return f"<data-uri mime={mime} bytes={len(match.group('data'))}>"
        return _shorten_text(value)
    return value


class Invoker:
    """Awaitable handle for one defined flow or prompt."""

    def __init__(self, spec: FlowSpec | PromptSpec, runner: FlowRunner, selection: BackendSelection) -> None:
        self.spec = spec
        self._runner = runner
        self._selection = selection

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> str:
        return self.spec.kind

    def __repr__(self) -> str:
        return f"Invoker({self.kind}={self.name!r}, backend={self._selection.kind})"

    async def __call__(self, payload: Payload) -> Any:
        backend = self._selection.kind
        self._log_call(payload)
        if self._selection.degraded:
            if not validate(self.spec.input_schema, payload):
                logger.warning("flow.call.input_mismatch name={} backend={}", self.name, backend)
            return await self._runner(payload)

        check(self.spec.input_schema, payload, flow=self.name)
        start = time.monotonic()
        try:
            result = await self._runner(payload)
            check(self.spec.output_schema, result, flow=self.name)
        except Exception:
            logger.exception("flow.call.error name={} backend={}", self.name, backend)
            raise
        finally:
            duration = time.monotonic() - start
            logger.info("flow.call.end name={} duration={:.3f}ms", self.name, duration * 1000)
        return result

    def _log_call(self, payload: Payload) -> None:
        try:
            rendered = json.dumps(redact(payload), ensure_ascii=False)
        except TypeError:
            rendered = repr(redact(payload))
        log = logger.warning if self._selection.degraded else logger.info
        log(
            "flow.call.start kind={} name={} backend={} input={}",
            self.kind,
            self.name,
            self._selection.kind,
            rendered,
        )


class Registry:
    """Declares named flows and prompts on whichever backend was selected."""

    def __init__(self, selection: BackendSelection) -> None:
        self._selection = selection
        self._invokers: dict[str, Invoker] = {}

    @property
    def selection(self) -> BackendSelection:
        return self._selection

    def define_flow(self, spec: FlowSpec) -> Invoker:
        self._ensure_unique(spec.name)
        runner = self._selection.backend.define_flow(spec)
        return self._register(spec, runner)

    def define_prompt(self, spec: PromptSpec) -> Invoker:
        self._ensure_unique(spec.name)
        runner = self._selection.backend.define_prompt(spec)
        return self._register(spec, runner)

    async def invoke(self, invoker: Invoker, payload: Payload) -> Any:
        return await invoker(payload)

    def has(self, name: str) -> bool:
        return name in self._invokers

    def get(self, name: str) -> Invoker | None:
        return self._invokers.get(name)

    def names(self) -> builtins.list[str]:
        return sorted(self._invokers)

    def _ensure_unique(self, name: str) -> None:
        if name in self._invokers:
            logger.error("registry.duplicate name={}", name)
            raise DuplicateDefinitionError(name)

    def _register(self, spec: FlowSpec | PromptSpec, runner: FlowRunner) -> Invoker:
        invoker = Invoker(spec, runner, self._selection)
        self._invokers[spec.name] = invoker
        logger.debug("registry.define kind={} name={} backend={}", spec.kind, spec.name, self._selection.kind)
        return invoker
