"""Abstract base classes for accessibility test executors."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from a11y_orchestrator.errors import ExecutorError
from a11y_orchestrator.models.result import ExecutorResult

type ProgressReporter = Callable[[float, str], None]


@dataclass(frozen=True, kw_only=True)
class TestExecutor(ABC):
    """Runs one kind of accessibility check against one URL.

    Implementations must be safe to call concurrently for different URLs and
    should raise ExecutorError with a human-readable message on failure.
    """

    __test__ = False

    @abstractmethod
    async def execute(
        self,
        url: str,
        test_type: str,
        report_progress: ProgressReporter,
    ) -> ExecutorResult:
        """Run the check and return its normalized result.

        Args:
            url: Page to test
            test_type: Test type key (e.g., "a11y:axe")
            report_progress: Callback taking a percentage (0-100) and a message

        Returns:
            Normalized violation/pass counts

        """


@dataclass(frozen=True, kw_only=True)
class PollingExecutor[T](TestExecutor):
    """Executor for remote tools that start a scan and are polled for results.

    Generic type T represents the dispatch state - whatever the executor needs
    to pass from dispatch to poll, such as a remote scan ID.
    """

    timeout: float = 600
    poll_interval: float = 5

    @abstractmethod
    async def dispatch_scan(self, url: str, test_type: str) -> T:
        """Start a scan and return the state needed to poll it."""

    @abstractmethod
    async def poll_scan(
        self,
        dispatch_state: T,
        report_progress: ProgressReporter,
    ) -> ExecutorResult | None:
        """Return the result if the scan finished, None if still running."""

    async def execute(
        self,
        url: str,
        test_type: str,
        report_progress: ProgressReporter,
    ) -> ExecutorResult:
        """Dispatch a scan and wait for its result."""
        dispatch_state = await self.dispatch_scan(url, test_type)
        return await self.wait_for_completion(dispatch_state, report_progress)

    async def wait_for_completion(
        self,
        dispatch_state: T,
        report_progress: ProgressReporter,
    ) -> ExecutorResult:
        """Poll until the scan completes.

        Raises:
            ExecutorError: If the scan does not complete within the timeout

        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        while True:
            if (result := await self.poll_scan(dispatch_state, report_progress)) is not None:
                return result

            if loop.time() >= deadline:
                raise ExecutorError(
                    f"Scan did not complete within {self.timeout:g} seconds"
                )

            await asyncio.sleep(self.poll_interval)
