"""Mapping of test types to the executors that run them."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from a11y_orchestrator.errors import SubmissionError
from a11y_orchestrator.executors.base import TestExecutor

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ExecutorRegistry:
    """Strategy map from test type to executor, populated once at startup."""

    _executors: dict[str, TestExecutor] = field(default_factory=dict)

    def register(self, test_type: str, executor: TestExecutor) -> None:
        """Register the executor for a test type, replacing any previous one."""
        if test_type in self._executors:
            log.warning("Replacing executor for test type %s", test_type)
        self._executors[test_type] = executor

    def register_all(self, test_types: Iterable[str], executor: TestExecutor) -> None:
        """Register one executor for several test types."""
        for test_type in test_types:
            self.register(test_type, executor)

    def get(self, test_type: str) -> TestExecutor:
        """Return the executor for a test type.

        Raises:
            SubmissionError: If no executor is registered for the test type

        """
        try:
            return self._executors[test_type]
        except KeyError:
            raise SubmissionError(
                f"Unknown test type '{test_type}'. "
                f"Registered test types: {list(self._executors)}"
            ) from None

    @property
    def test_types(self) -> Sequence[str]:
        """Registered test type keys."""
        return list(self._executors)

    def __contains__(self, test_type: object) -> bool:
        return test_type in self._executors
