"""Executor manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from a11y_orchestrator.executors.base import TestExecutor


@dataclass(frozen=True, kw_only=True)
class ExecutorManifest[ConfigT: BaseModel]:
    """Manifest describing an executor plugin.

    The manifest contains references to the configuration class and the
    executor factory function for lazy loading of executors by key.
    """

    config_cls: type[ConfigT]
    executor_factory: Callable[[ConfigT], AbstractAsyncContextManager[TestExecutor]]
