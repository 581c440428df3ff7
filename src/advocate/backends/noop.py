"""Backend that answers locally when no model service is configured."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from loguru import logger

from advocate.backends.base import Backend, BackendKind
from advocate.schema import Schema, validate
from advocate.synthesizer import DIAGNOSTIC_MESSAGE, fallback_payload, synthesize_or_fallback
from advocate.types import FlowRunner, FlowSpec, Payload, PromptSpec

GENERATE_RESPONSE_NAMES = frozenset({"generateResponseFromContextFlow", "generateResponseFromContextPrompt"})
INTERPRET_COMMAND_NAMES = frozenset({"interpretCommandFlow", "interpretCommandPrompt"})
SUMMARIZE_PAGE_NAMES = frozenset({"summarizePageContentFlow", "summarizePageContentPrompt"})


def _noop_text(name: str) -> str:
    return f"{DIAGNOSTIC_MESSAGE} (NoOp for {name})"


def _response_payload(name: str) -> dict[str, Any]:
    return {"response": _noop_text(name)}


def _interpretation_payload(_name: str) -> dict[str, Any]:
    return {"action": "unknown", "parameters": {}, "confidence": 0}


def _summary_payload(name: str) -> dict[str, Any]:
    return {"summary": _noop_text(name)}


class NoOpBackend(Backend):
    """Never runs flow bodies or renders prompts; every call is answered locally.

    The three well-known flows (and their prompts) get curated payloads; any
    other name gets a synthesized placeholder for its output schema. Runners
    never raise.
    """

    kind: BackendKind = "noop"

    CURATED: ClassVar[dict[frozenset[str], Callable[[str], dict[str, Any]]]] = {
        GENERATE_RESPONSE_NAMES: _response_payload,
        INTERPRET_COMMAND_NAMES: _interpretation_payload,
        SUMMARIZE_PAGE_NAMES: _summary_payload,
    }

    def define_flow(self, spec: FlowSpec) -> FlowRunner:
        logger.warning("noop.define kind=flow name={} (AI logic will NOT be executed)", spec.name)
        return self._runner(spec.name, "flow", spec.output_schema)

    def define_prompt(self, spec: PromptSpec) -> FlowRunner:
        logger.warning("noop.define kind=prompt name={} (AI logic will NOT be executed)", spec.name)
        return self._runner(spec.name, "prompt", spec.output_schema)

    def respond(self, name: str, output_schema: Schema | None) -> Any:
        """Produce the degraded payload for ``name``."""
        try:
            builder = self._curated_builder(name)
            if builder is not None:
                payload = builder(name)
                if output_schema is None or validate(output_schema, payload):
                    return payload
                logger.warning("noop.curated.mismatch name={}", name)
            return synthesize_or_fallback(output_schema, qualify=True)
        except Exception:
            logger.exception("noop.respond.error name={}", name)
            return fallback_payload()

    def _runner(self, name: str, kind: str, output_schema: Schema | None) -> FlowRunner:
        async def _run(payload: Payload) -> Any:
            _ = payload
            logger.debug("noop.call kind={} name={}", kind, name)
            return self.respond(name, output_schema)

        _run.__name__ = f"noop_{kind}__{name}"
        return _run

    def _curated_builder(self, name: str) -> Callable[[str], dict[str, Any]] | None:
        for names, builder in self.CURATED.items():
            if name in names:
                return builder
        return None
