"""Flow and prompt declarations shared by the registry and the backends."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from advocate.schema import Schema

Payload: TypeAlias = dict[str, Any]
FlowBody: TypeAlias = Callable[[Payload], Awaitable[Any]]
PromptTemplate: TypeAlias = str | Callable[[Payload], str]
FlowRunner: TypeAlias = Callable[[Payload], Awaitable[Any]]

SpecKind = Literal["flow", "prompt"]


@dataclass(frozen=True)
class FlowSpec:
    """Named unit of work; ``body`` only ever runs on the live backend."""

    name: str
    input_schema: Schema
    output_schema: Schema
    body: FlowBody

    @property
    def kind(self) -> SpecKind:
        return "flow"


@dataclass(frozen=True)
class PromptSpec:
    """Named model prompt rendered from ``template``."""

    name: str
    input_schema: Schema
    output_schema: Schema
    template: PromptTemplate
    media_field: str | None = None

    @property
    def kind(self) -> SpecKind:
        return "prompt"

    def render(self, payload: Payload) -> str:
        if callable(self.template):
            return self.template(payload)
        return self.template.format_map(_BlankMissing(payload))


class _BlankMissing(dict[str, Any]):
    def __missing__(self, key: str) -> str:
        return ""
