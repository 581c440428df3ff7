"""Live and degraded-mode backends."""

from advocate.backends.base import Backend, BackendKind
from advocate.backends.live import LiveBackend
from advocate.backends.noop import NoOpBackend
from advocate.backends.selector import BackendSelection, StartupDiagnostic, select_backend

__all__ = [
    "Backend",
    "BackendKind",
    "BackendSelection",
    "LiveBackend",
    "NoOpBackend",
    "StartupDiagnostic",
    "select_backend",
]
