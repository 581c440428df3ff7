"""Advocate - a devil's advocate you can talk to."""

from .backends import BackendSelection, select_backend
from .flows import Flows, Registry, build_flows
from .orchestrator import ConversationOrchestrator

__version__ = "0.1.0"

__all__ = ["BackendSelection", "ConversationOrchestrator", "Flows", "Registry", "build_flows", "select_backend"]
