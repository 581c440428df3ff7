from __future__ import annotations

from typing import Any

import pytest

from advocate import schema as s
from advocate.backends import BackendSelection, NoOpBackend
from advocate.errors import DuplicateDefinitionError, ValidationError
from advocate.flows import Registry, redact
from advocate.types import FlowSpec, Payload, PromptSpec

ECHO_INPUT = s.obj(text=s.string())
ECHO_OUTPUT = s.obj(echo=s.string())


def _flow(name: str, body: Any) -> FlowSpec:
    return FlowSpec(name=name, input_schema=ECHO_INPUT, output_schema=ECHO_OUTPUT, body=body)


@pytest.mark.asyncio
async def test_live_flow_runs_body_and_checks_output(scripted) -> None:
    _backend, selection = scripted({"echo": [{"echo": "hi"}]})
    registry = Registry(selection)
    invoker = registry.define_flow(_flow("echo", None))

    assert await registry.invoke(invoker, {"text": "hi"}) == {"echo": "hi"}


@pytest.mark.asyncio
async def test_live_nonconforming_output_raises_validation_error(scripted) -> None:
    _backend, selection = scripted({"echo": [{"echo": 42}]})
    invoker = Registry(selection).define_flow(_flow("echo", None))

    with pytest.raises(ValidationError) as exc_info:
        await invoker({"text": "hi"})
    assert exc_info.value.flow == "echo"


@pytest.mark.asyncio
async def test_live_nonconforming_input_is_rejected(scripted) -> None:
    backend, selection = scripted({"echo": [{"echo": "hi"}]})
    invoker = Registry(selection).define_flow(_flow("echo", None))

    with pytest.raises(ValidationError):
        await invoker({"text": 1})
    assert backend.calls == []


def test_duplicate_names_are_rejected(scripted) -> None:
    _backend, selection = scripted({})
    registry = Registry(selection)
    registry.define_flow(_flow("echo", None))

    with pytest.raises(DuplicateDefinitionError):
        registry.define_prompt(
            PromptSpec(name="echo", input_schema=ECHO_INPUT, output_schema=ECHO_OUTPUT, template="{text}")
        )
    assert registry.names() == ["echo"]


@pytest.mark.asyncio
async def test_noop_never_runs_the_body() -> None:
    calls: list[Payload] = []

    async def body(payload: Payload) -> dict[str, str]:
        calls.append(payload)
        return {"echo": "should not run"}

    registry = Registry(BackendSelection(backend=NoOpBackend()))
    invoker = registry.define_flow(_flow("echo", body))

    first = await invoker({"text": "hi"})
    second = await invoker({"text": "hi"})

    assert calls == []
    assert s.validate(ECHO_OUTPUT, first)
    assert first.keys() == second.keys()


@pytest.mark.asyncio
async def test_noop_prompt_never_renders_template() -> None:
    def template(_payload: Payload) -> str:
        raise AssertionError("template rendered")

    registry = Registry(BackendSelection(backend=NoOpBackend()))
    invoker = registry.define_prompt(
        PromptSpec(name="shout", input_schema=ECHO_INPUT, output_schema=ECHO_OUTPUT, template=template)
    )

    assert s.validate(ECHO_OUTPUT, await invoker({"text": "hi"}))


def test_redact_shortens_and_masks() -> None:
    payload = {
        "query": "x" * 200,
        "mediaDataUri": "data:image/png;base64,AAAABBBB",
        "api_key": "secret",
        "nested": {"token": "t", "ok": 1},
    }
    redacted = redact(payload)

    assert len(redacted["query"]) == 80
    assert redacted["query"].endswith("...")
    assert redacted["mediaDataUri"] == "<data-uri mime=image/png bytes=8>"
    assert redacted["api_key"] == "***"
    assert redacted["nested"] == {"token": "***", "ok": 1}


@pytest.mark.asyncio
async def test_call_is_logged_with_redacted_input(scripted) -> None:
    from loguru import logger

    records: list[str] = []
    sink_id = logger.add(records.append, format="{message}", level="INFO")
    try:
        _backend, selection = scripted({"echo": [{"echo": "hi"}]})
        invoker = Registry(selection).define_flow(_flow("echo", None))
        await invoker({"text": "data:video/mp4;base64,QUJD"})
    finally:
        logger.remove(sink_id)

    start = next(line for line in records if "flow.call.start" in line)
    assert "name=echo" in start
    assert "<data-uri mime=video/mp4 bytes=4>" in start


@pytest.mark.asyncio
async def test_degraded_call_is_logged_as_warning_with_redacted_input() -> None:
    from loguru import logger

    from advocate.flows import build_flows

    records: list[str] = []
    sink_id = logger.add(records.append, format="{level} | {message}", level="DEBUG")
    try:
        flows = build_flows(Registry(BackendSelection(backend=NoOpBackend())))
        await flows.respond(context="look", query="look", media_data_uri="data:image/png;base64,AAAABBBB")
    finally:
        logger.remove(sink_id)

    start = next(line for line in records if "flow.call.start" in line)
    assert start.startswith("WARNING | ")
    assert "name=generateResponseFromContextFlow backend=noop" in start
    assert "<data-uri mime=image/png bytes=8>" in start
    assert "AAAABBBB" not in start


def test_registry_lookup_by_name(scripted) -> None:
    _backend, selection = scripted({})
    registry = Registry(selection)
    invoker = registry.define_flow(_flow("echo", None))

    assert registry.has("echo") is True
    assert registry.get("echo") is invoker
    assert registry.has("missing") is False
    assert registry.get("missing") is None


def test_string_template_blanks_missing_fields() -> None:
    spec = PromptSpec(
        name="greet",
        input_schema=s.obj(name=s.string(), title=s.optional(s.string())),
        output_schema=s.string(),
        template="Hello {title} {name}!",
    )

    assert spec.render({"name": "Ada"}) == "Hello  Ada!"
    assert spec.render({"name": "Ada", "title": "Dr."}) == "Hello Dr. Ada!"
