"""Flow/prompt registry and the conversation flows."""

from advocate.flows.catalog import Flows, build_flows
from advocate.flows.registry import Invoker, Registry, redact

__all__ = ["Flows", "Invoker", "Registry", "build_flows", "redact"]
