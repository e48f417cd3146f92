"""Tests for job queue."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from unittest.mock import AsyncMock

import pytest

from a11y_orchestrator.errors import ExecutorError, SubmissionError
from a11y_orchestrator.executors.base import TestExecutor
from a11y_orchestrator.executors.registry import ExecutorRegistry
from a11y_orchestrator.job_queue import JobQueue
from a11y_orchestrator.models.batch import Batch
from a11y_orchestrator.models.result import ExecutorResult
from a11y_orchestrator.store.base import ResultStore
from a11y_orchestrator.store.memory import MemoryResultStore
from a11y_orchestrator.testing.executors import ScriptedExecutor
from a11y_orchestrator.tracker import BatchTracker

AXE = "a11y:axe"
KEYBOARD = "test:keyboard"


@pytest.fixture
def store() -> MemoryResultStore:
    """Create in-memory result store."""
    return MemoryResultStore()


def make_queue(
    executor: TestExecutor,
    store: ResultStore,
    test_types: Sequence[str] = (AXE, KEYBOARD),
    **kwargs: object,
) -> JobQueue:
    """Create a queue with one executor registered for the test types."""
    registry = ExecutorRegistry()
    registry.register_all(test_types, executor)
    return JobQueue(registry=registry, store=store, **kwargs)  # type: ignore[arg-type]


async def test_never_runs_more_than_max_concurrent(store: MemoryResultStore) -> None:
    """Starts at most max_concurrent jobs and the rest in FIFO order."""
    gate = asyncio.Event()
    executor = ScriptedExecutor(gate=gate)
    queue = make_queue(executor, store, max_concurrent=2)

    for i in range(5):
        queue.submit(f"https://example.com/{i}", AXE, "batch-1")
    await asyncio.sleep(0)

    status = queue.get_status()
    assert status.total_active == 2
    assert status.total_queued == 3
    assert [job.url for job in status.queued] == [
        "https://example.com/2",
        "https://example.com/3",
        "https://example.com/4",
    ]

    gate.set()
    await queue.join()

    assert executor.stats.peak == 2
    assert queue.get_status().total_completed == 5
    assert [url for url, _ in executor.stats.calls] == [
        f"https://example.com/{i}" for i in range(5)
    ]


async def test_two_pages_two_test_types_run_two_at_a_time(
    store: MemoryResultStore,
) -> None:
    """Runs a 2x2 batch with two concurrent jobs and completes all four."""
    executor = ScriptedExecutor(delay=0.01)
    queue = make_queue(executor, store, max_concurrent=2)

    for url in ("https://example.com/a", "https://example.com/b"):
        for test_type in (AXE, KEYBOARD):
            queue.submit(url, test_type, "batch-1")
    await queue.join()

    batch = queue.tracker.get("batch-1")
    assert batch is not None
    assert executor.stats.peak == 2
    assert batch.completed_jobs == 4
    assert batch.status == "completed"
    assert len(await store.list_page_results("batch-1")) == 4


async def test_failed_job_does_not_affect_siblings(store: MemoryResultStore) -> None:
    """An executor error fails only its own job."""
    executor = ScriptedExecutor(
        results={("https://example.com/b", KEYBOARD): ExecutorError("timeout")}
    )
    queue = make_queue(executor, store)

    job_ids = [
        queue.submit(url, test_type, "batch-1")
        for url in ("https://example.com/a", "https://example.com/b")
        for test_type in (AXE, KEYBOARD)
    ]
    await queue.join()

    failed = queue.get_job(job_ids[3])
    assert failed is not None
    assert failed.status == "failed"
    assert failed.error == "timeout"
    assert failed.result is None
    assert await store.get_page_result("batch-1", job_ids[3]) is None

    batch = queue.tracker.get("batch-1")
    assert batch is not None
    assert batch.failed_jobs == 1
    assert batch.completed_jobs == 3


async def test_unexpected_exception_fails_job(
    store: MemoryResultStore, caplog: pytest.LogCaptureFixture
) -> None:
    """Any exception escaping the executor is recorded and logged."""
    executor = ScriptedExecutor(
        results={("https://example.com/", AXE): RuntimeError("browser crashed")}
    )
    queue = make_queue(executor, store)

    with caplog.at_level(logging.ERROR):
        job_id = queue.submit("https://example.com/", AXE, "batch-1")
        await queue.join()

    job = queue.get_job(job_id)
    assert job is not None
    assert job.status == "failed"
    assert job.error == "browser crashed"
    assert "browser crashed" in caplog.text


async def test_job_timeout_fails_job(store: MemoryResultStore) -> None:
    """Jobs exceeding the deadline fail with a deadline message."""
    executor = ScriptedExecutor(delay=5)
    queue = make_queue(executor, store, job_timeout=0.01)

    job_id = queue.submit("https://example.com/", AXE, "batch-1")
    await queue.join()

    job = queue.get_job(job_id)
    assert job is not None
    assert job.status == "failed"
    assert job.error is not None
    assert "deadline" in job.error


async def test_persistence_failure_fails_job() -> None:
    """A result that cannot be stored fails the job."""
    store = AsyncMock(spec=ResultStore)
    store.save_page_result.side_effect = RuntimeError("disk full")
    queue = make_queue(ScriptedExecutor(), store)

    job_id = queue.submit("https://example.com/", AXE, "batch-1")
    await queue.join()

    job = queue.get_job(job_id)
    assert job is not None
    assert job.status == "failed"
    assert job.error == "disk full"


async def test_completed_job_records_result_and_history(
    store: MemoryResultStore,
) -> None:
    """Completed jobs carry their result, progress history and metrics."""
    result = ExecutorResult(violations=3, passed=7)
    executor = ScriptedExecutor(
        results={("https://example.com/", AXE): result}, progress_steps=(50,)
    )
    queue = make_queue(executor, store)

    job_id = queue.submit(
        "https://example.com/",
        AXE,
        "batch-1",
        batch_name="Site",
        page_title="Home",
        page_depth=1,
    )
    await queue.join()

    job = queue.get_job(job_id)
    assert job is not None
    assert job.status == "completed"
    assert job.progress == 100
    assert job.result == result
    assert job.execution_time is not None
    assert job.performance_metrics is not None
    assert [entry.progress for entry in job.progress_history] == [10, 50, 90, 95, 100]
    assert job.progress_history[0].message == "Initializing axe-core Analysis..."
    assert job.progress_history[2].message == "Processing axe-core Analysis results..."
    assert job.progress_history[-1].message == "Test completed successfully"
    assert job.progress_history[-1].phase == "completed"

    page_result = await store.get_page_result("batch-1", job_id)
    assert page_result is not None
    assert page_result.violations == 3
    assert page_result.passed == 7
    assert page_result.page_title == "Home"
    assert page_result.page_depth == 1


async def test_batch_completion_handler_called_once(store: MemoryResultStore) -> None:
    """The completion handler runs once, after the last job finished."""
    handler = AsyncMock()
    executor = ScriptedExecutor(
        results={("https://example.com/c", AXE): ExecutorError("refused")}
    )
    queue = make_queue(executor, store, on_batch_complete=handler)

    for url in ("https://example.com/a", "https://example.com/b", "https://example.com/c"):
        queue.submit(url, AXE, "batch-1")
    await queue.join()

    batch = queue.tracker.get("batch-1")
    assert batch is not None
    handler.assert_awaited_once_with(batch)
    assert batch.status == "completed"
    assert batch.finished.is_set()


async def test_completion_handler_failure_is_swallowed(
    store: MemoryResultStore, caplog: pytest.LogCaptureFixture
) -> None:
    """A failing completion handler is logged and the batch still finishes."""
    handler = AsyncMock(side_effect=RuntimeError("aggregation broke"))
    queue = make_queue(ScriptedExecutor(), store, on_batch_complete=handler)

    with caplog.at_level(logging.ERROR):
        queue.submit("https://example.com/", AXE, "batch-1")
        await queue.join()

    batch = queue.tracker.get("batch-1")
    assert batch is not None
    assert batch.finished.is_set()
    assert "aggregation broke" in caplog.text


async def test_batch_with_only_failures_completes(store: MemoryResultStore) -> None:
    """A batch whose every job failed still reaches completion."""
    handler = AsyncMock()
    executor = ScriptedExecutor(
        results={
            ("https://example.com/", AXE): ExecutorError("a"),
            ("https://example.com/", KEYBOARD): ExecutorError("b"),
        }
    )
    queue = make_queue(executor, store, on_batch_complete=handler)

    queue.submit("https://example.com/", AXE, "batch-1")
    queue.submit("https://example.com/", KEYBOARD, "batch-1")
    await queue.join()

    batch = queue.tracker.get("batch-1")
    assert batch is not None
    assert batch.failed_jobs == 2
    assert batch.status == "completed"
    handler.assert_awaited_once()


@dataclass(kw_only=True)
class RecordingTracker(BatchTracker):
    """Tracker keeping the counters of every recount."""

    snapshots: list[tuple[int, int, int, int, int]] = field(default_factory=list)

    def recompute(self, batch_id: str) -> Batch:
        batch = super().recompute(batch_id)
        self.snapshots.append(
            (
                batch.queued_jobs,
                batch.running_jobs,
                batch.completed_jobs,
                batch.failed_jobs,
                batch.total_jobs,
            )
        )
        return batch


async def test_counters_sum_to_total_on_every_recount(
    store: MemoryResultStore,
) -> None:
    """Queued, running, completed and failed always add up to the total."""
    tracker = RecordingTracker()
    executor = ScriptedExecutor(
        results={("https://example.com/b", KEYBOARD): ExecutorError("timeout")},
        progress_steps=(25, 50, 75),
        delay=0.01,
    )
    queue = make_queue(executor, store, max_concurrent=2, tracker=tracker)

    for url in ("https://example.com/a", "https://example.com/b", "https://example.com/c"):
        for test_type in (AXE, KEYBOARD):
            queue.submit(url, test_type, "batch-1")
    await queue.join()

    assert tracker.snapshots
    for queued, running, completed, failed, total in tracker.snapshots:
        assert queued + running + completed + failed == total
    assert any(running > 0 for _, running, _, _, _ in tracker.snapshots)
    assert tracker.snapshots[-1] == (0, 0, 5, 1, 6)


async def test_submit_rejects_unknown_test_type(store: MemoryResultStore) -> None:
    """Unknown test types are rejected before any job is created."""
    queue = make_queue(ScriptedExecutor(), store)

    with pytest.raises(SubmissionError) as exc_info:
        queue.submit("https://example.com/", "test:unknown", "batch-1")

    assert "test:unknown" in str(exc_info.value)
    assert queue.tracker.get("batch-1") is None
    assert queue.get_status().total_queued == 0


async def test_submit_rejects_completed_batch(store: MemoryResultStore) -> None:
    """Jobs cannot be added once a batch completed."""
    queue = make_queue(ScriptedExecutor(), store)
    queue.submit("https://example.com/", AXE, "batch-1")
    await queue.join()

    with pytest.raises(SubmissionError):
        queue.submit("https://example.com/", KEYBOARD, "batch-1")


async def test_update_progress_ignores_jobs_not_running(
    store: MemoryResultStore,
) -> None:
    """Progress updates only apply to running jobs and are clamped."""
    gate = asyncio.Event()
    queue = make_queue(ScriptedExecutor(gate=gate), store, max_concurrent=1)

    running_id = queue.submit("https://example.com/a", AXE, "batch-1")
    queued_id = queue.submit("https://example.com/b", AXE, "batch-1")

    queue.update_progress(queued_id, 50, "ignored")
    queue.update_progress(running_id, 150, "clamped")

    queued = queue.get_job(queued_id)
    running = queue.get_job(running_id)
    assert queued is not None
    assert queued.progress == 0
    assert queued.progress_history == []
    assert running is not None
    assert running.progress == 100

    gate.set()
    await queue.join()


async def test_get_job_returns_copies(store: MemoryResultStore) -> None:
    """Returned jobs are snapshots, not live queue state."""
    queue = make_queue(ScriptedExecutor(), store)
    job_id = queue.submit("https://example.com/", AXE, "batch-1")
    await queue.join()

    job = queue.get_job(job_id)
    assert job is not None
    job.status = "failed"

    again = queue.get_job(job_id)
    assert again is not None
    assert again.status == "completed"
    assert queue.get_job("job-missing") is None


async def test_batch_jobs_lists_jobs_in_submission_order(
    store: MemoryResultStore,
) -> None:
    """Lists jobs of one batch only."""
    queue = make_queue(ScriptedExecutor(), store)
    first = queue.submit("https://example.com/a", AXE, "batch-1")
    queue.submit("https://example.com/b", AXE, "batch-2")
    second = queue.submit("https://example.com/c", KEYBOARD, "batch-1")
    await queue.join()

    assert [job.id for job in queue.batch_jobs("batch-1")] == [first, second]


def test_rejects_non_positive_concurrency(store: MemoryResultStore) -> None:
    """max_concurrent must allow at least one job."""
    with pytest.raises(ValueError):
        make_queue(ScriptedExecutor(), store, max_concurrent=0)
