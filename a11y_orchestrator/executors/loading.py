"""Loading of executor plugins from entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from a11y_orchestrator.errors import OrchestratorError
from a11y_orchestrator.executors.manifest import ExecutorManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "a11y_orchestrator.executors"


class ExecutorNotFoundError(OrchestratorError):
    """Raised when no installed plugin provides the requested executor."""

    def __init__(self, key: str, available: Sequence[str]) -> None:
        listed = ", ".join(available) or "none installed"
        super().__init__(
            f"Executor '{key}' not found in entry point group "
            f"'{ENTRY_POINT_GROUP}'. Available executors: {listed}"
        )
        self.key = key
        self.available = list(available)


class InvalidExecutorPluginError(OrchestratorError):
    """Raised when an executor entry point does not resolve to a manifest."""


def load_executor_manifest(key: str) -> ExecutorManifest[Any]:
    """Load the manifest of the executor plugin registered under ``key``.

    Args:
        key: The entry point name in the ``a11y_orchestrator.executors``
             group (e.g., "http-scanner")

    Raises:
        ExecutorNotFoundError: If no installed plugin uses the key.
        InvalidExecutorPluginError: If the entry point is not a manifest.

    """
    entries = {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}

    entry = entries.get(key)
    if entry is None:
        raise ExecutorNotFoundError(key, sorted(entries))

    manifest = entry.load()
    if not isinstance(manifest, ExecutorManifest):
        raise InvalidExecutorPluginError(
            f"Entry point '{key}' ({entry.value}) is a "
            f"{type(manifest).__name__}, not an ExecutorManifest"
        )

    log.debug("Loaded executor '%s' from %s", key, entry.value)
    return manifest
