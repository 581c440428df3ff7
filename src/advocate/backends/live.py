"""Backend that runs prompts against a model service through Republic."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

from loguru import logger
from republic import LLM

from advocate.backends.base import Backend, BackendKind
from advocate.config import Settings
from advocate.errors import BackendInitError, ValidationError
from advocate.schema import StringSchema, describe
from advocate.types import FlowRunner, FlowSpec, Payload, PromptSpec

FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_llm(settings: Settings) -> LLM:
    """Build the Republic LLM client for the configured model."""
    api_key = settings.resolved_api_key
    if not api_key:
        raise BackendInitError("no API key configured")
    return LLM(
        model=settings.model,
        api_key=api_key,
        api_base=settings.api_base,
    )


class LiveBackend(Backend):
    """Flows run their bodies; prompts call the model and parse its JSON reply."""

    kind: BackendKind = "live"

    def __init__(self, settings: Settings, llm: Any | None = None) -> None:
        self._settings = settings
        self._llm = llm if llm is not None else build_llm(settings)
        self._timeout = settings.model_timeout_seconds

    def define_flow(self, spec: FlowSpec) -> FlowRunner:
        async def _run(payload: Payload) -> Any:
            return await spec.body(payload)

        _run.__name__ = f"flow__{spec.name}"
        return _run

    def define_prompt(self, spec: PromptSpec) -> FlowRunner:
        async def _run(payload: Payload) -> Any:
            messages = self._build_messages(spec, payload)
            text = await self._complete(messages)
            return self._parse_output(spec, text)

        _run.__name__ = f"prompt__{spec.name}"
        return _run

    def _build_messages(self, spec: PromptSpec, payload: Payload) -> list[dict[str, Any]]:
        rendered = spec.render(payload)
        if isinstance(spec.output_schema, StringSchema):
            contract = "Respond with plain text only."
        else:
            shape = json.dumps(describe(spec.output_schema), ensure_ascii=False)
            contract = f"Respond with a single JSON object only, no prose, matching this shape: {shape}"

        media = payload.get(spec.media_field) if spec.media_field else None
        if isinstance(media, str) and media:
            user_content: Any = [
                {"type": "text", "text": rendered},
                {"type": "image_url", "image_url": {"url": media}},
            ]
        else:
            user_content = rendered
        return [
            {"role": "system", "content": contract},
            {"role": "user", "content": user_content},
        ]

    async def _complete(self, messages: list[dict[str, Any]]) -> str:
        if self._timeout is None:
            text = await self._llm.chat_async(messages=messages, max_tokens=self._settings.max_tokens)
        else:
            async with asyncio.timeout(self._timeout):
                text = await self._llm.chat_async(messages=messages, max_tokens=self._settings.max_tokens)
        return text or ""

    @staticmethod
    def _parse_output(spec: PromptSpec, text: str) -> Any:
        if isinstance(spec.output_schema, StringSchema):
            return text.strip()
        body = text.strip()
        if match := FENCE_RE.match(body):
            body = match.group(1)
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            pass
        start, end = body.find("{"), body.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(body[start : end + 1])
            except json.JSONDecodeError:
                pass
        logger.error("live.prompt.unparsable name={} text={!r}", spec.name, body[:200])
        raise ValidationError("model output is not valid JSON", flow=spec.name)
