"""Scripted executors for exercising the queue without real scanners."""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from a11y_orchestrator.executors.base import ProgressReporter, TestExecutor
from a11y_orchestrator.models.result import ExecutorResult


@dataclass(kw_only=True)
class ExecutionStats:
    """Calls seen by a scripted executor and its peak concurrency."""

    active: int = 0
    peak: int = 0
    calls: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class ScriptedExecutor(TestExecutor):
    """Returns canned results keyed by (url, test type).

    An exception instance in ``results`` is raised instead of returned. When
    ``gate`` is set, every call blocks until the event is set.
    """

    results: Mapping[tuple[str, str], ExecutorResult | Exception] = field(
        default_factory=dict
    )
    default: ExecutorResult = field(
        default_factory=lambda: ExecutorResult(violations=0, passed=10)
    )
    progress_steps: Sequence[float] = ()
    delay: float = 0
    gate: asyncio.Event | None = None
    stats: ExecutionStats = field(default_factory=ExecutionStats)

    async def execute(
        self,
        url: str,
        test_type: str,
        report_progress: ProgressReporter,
    ) -> ExecutorResult:
        self.stats.calls.append((url, test_type))
        self.stats.active += 1
        self.stats.peak = max(self.stats.peak, self.stats.active)
        try:
            for step in self.progress_steps:
                report_progress(step, f"Scanning {url} ({step:g}%)")
            if self.gate is not None:
                await self.gate.wait()
            await asyncio.sleep(self.delay)

            outcome = self.results.get((url, test_type), self.default)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.stats.active -= 1
