"""Backend capability interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from advocate.types import FlowRunner, FlowSpec, PromptSpec

BackendKind = Literal["live", "noop"]


class Backend(ABC):
    """Executes (or simulates) flows and prompts.

    Downstream code only sees this interface; the concrete variant is chosen
    once at startup by ``select_backend``.
    """

    kind: BackendKind

    @abstractmethod
    def define_flow(self, spec: FlowSpec) -> FlowRunner:
        """Return a runner for ``spec``."""

    @abstractmethod
    def define_prompt(self, spec: PromptSpec) -> FlowRunner:
        """Return a runner for ``spec``."""
