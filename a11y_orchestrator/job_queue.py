"""Bounded-concurrency job queue dispatching work to test executors."""

import asyncio
import copy
import logging
import uuid
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from a11y_orchestrator import catalogue
from a11y_orchestrator.executors.base import ProgressReporter
from a11y_orchestrator.executors.registry import ExecutorRegistry
from a11y_orchestrator.models.batch import Batch
from a11y_orchestrator.models.job import Job
from a11y_orchestrator.models.result import ExecutorResult, PageResult
from a11y_orchestrator.progress import calculate_job_performance, progress_entry, utcnow
from a11y_orchestrator.store.base import ResultStore
from a11y_orchestrator.tracker import BatchTracker

log = logging.getLogger(__name__)

type CompletionHandler = Callable[[Batch], Awaitable[None]]

EXECUTOR_PROGRESS_START = 10
EXECUTOR_PROGRESS_END = 90


@dataclass(frozen=True, kw_only=True)
class QueueStatus:
    """Snapshot of every job known to the queue, partitioned by state."""

    active: Sequence[Job]
    queued: Sequence[Job]
    completed: Sequence[Job]
    failed: Sequence[Job]

    @property
    def total_active(self) -> int:
        return len(self.active)

    @property
    def total_queued(self) -> int:
        return len(self.queued)

    @property
    def total_completed(self) -> int:
        return len(self.completed)

    @property
    def total_failed(self) -> int:
        return len(self.failed)


@dataclass(kw_only=True)
class JobQueue:
    """Admits jobs and runs at most ``max_concurrent`` of them at once.

    Jobs start in submission order. All state changes happen in synchronous
    code between awaits, so the event loop serializes them. A failing job is
    recorded as failed and never affects its siblings.
    """

    registry: ExecutorRegistry
    store: ResultStore
    tracker: BatchTracker = field(default_factory=BatchTracker)
    max_concurrent: int = 3
    job_timeout: float | None = None
    on_batch_complete: CompletionHandler | None = None
    clock: Callable[[], datetime] = utcnow
    _pending: deque[Job] = field(default_factory=deque, init=False)
    _running: dict[str, Job] = field(default_factory=dict, init=False)
    _completed: dict[str, Job] = field(default_factory=dict, init=False)
    _failed: dict[str, Job] = field(default_factory=dict, init=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")

    def submit(
        self,
        url: str,
        test_type: str,
        batch_id: str,
        *,
        batch_name: str | None = None,
        page_title: str | None = None,
        page_depth: int = 0,
    ) -> str:
        """Queue a job and start it if a slot is free.

        Raises:
            SubmissionError: If the test type has no executor or the batch
                already completed

        """
        self.registry.get(test_type)

        job = Job(
            id=f"job-{uuid.uuid4().hex}",
            batch_id=batch_id,
            batch_name=batch_name,
            url=url,
            test_type=test_type,
            page_title=page_title,
            page_depth=page_depth,
            created_at=self.clock(),
        )
        self.tracker.add_job(job)
        self._pending.append(job)
        log.info("Job %s queued: %s on %s", job.id, test_type, url)

        self._dispatch()
        return job.id

    def get_status(self) -> QueueStatus:
        """Deep-copied snapshot of all jobs."""
        return QueueStatus(
            active=copy.deepcopy(list(self._running.values())),
            queued=copy.deepcopy(list(self._pending)),
            completed=copy.deepcopy(list(self._completed.values())),
            failed=copy.deepcopy(list(self._failed.values())),
        )

    def get_job(self, job_id: str) -> Job | None:
        """Copy of a job in any state, None if unknown."""
        for partition in (self._running, self._completed, self._failed):
            if job_id in partition:
                return copy.deepcopy(partition[job_id])
        for job in self._pending:
            if job.id == job_id:
                return copy.deepcopy(job)
        return None

    def batch_jobs(self, batch_id: str) -> Sequence[Job]:
        """Copies of the jobs of one batch, in submission order."""
        return copy.deepcopy(list(self.tracker.jobs(batch_id)))

    @property
    def running_count(self) -> int:
        """Number of jobs currently executing."""
        return len(self._running)

    def update_progress(self, job_id: str, progress: float, message: str) -> None:
        """Record a progress update of a running job.

        Updates for jobs that are not running are ignored.
        """
        job = self._running.get(job_id)
        if job is None or job.status != "running":
            return

        progress = max(0.0, min(100.0, progress))
        now = self.clock()
        job.progress = progress
        job.progress_message = message
        job.progress_history.append(progress_entry(job, progress, message, now))
        self.tracker.recompute(job.batch_id)

    async def join(self) -> None:
        """Wait until no job is pending or running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _dispatch(self) -> None:
        while self._pending and len(self._running) < self.max_concurrent:
            self._start(self._pending.popleft())

    def _start(self, job: Job) -> None:
        job.status = "running"
        job.started_at = self.clock()
        self._running[job.id] = job
        self.tracker.recompute(job.batch_id)

        log.info(
            "Starting job %s (%d/%d active, %d queued)",
            job.id,
            len(self._running),
            self.max_concurrent,
            len(self._pending),
        )
        task = asyncio.create_task(self._run(job), name=job.id)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, job: Job) -> None:
        executor = self.registry.get(job.test_type)
        name = catalogue.display_name(job.test_type)
        deadline = asyncio.timeout(self.job_timeout)

        try:
            self.update_progress(job.id, EXECUTOR_PROGRESS_START, f"Initializing {name}...")
            async with deadline:
                result = await executor.execute(
                    job.url, job.test_type, self._executor_progress(job)
                )
            self.update_progress(
                job.id, EXECUTOR_PROGRESS_END, f"Processing {name} results..."
            )
            self.update_progress(job.id, 95, "Storing results...")
            await self.store.save_page_result(self._page_result(job, result))
        except Exception as e:
            if deadline.expired():
                message = f"Job exceeded the {self.job_timeout:g}s deadline"
            else:
                message = str(e) or type(e).__name__
            log.error("Job %s failed: %s", job.id, message, exc_info=e)
            self._fail(job, message)
        else:
            self._complete(job, result)

        batch = self.tracker.recompute(job.batch_id)
        self._dispatch()

        if self.tracker.claim_completion(batch.id):
            await self._finish_batch(batch)

    def _executor_progress(self, job: Job) -> ProgressReporter:
        span = EXECUTOR_PROGRESS_END - EXECUTOR_PROGRESS_START

        def report(progress: float, message: str) -> None:
            scaled = EXECUTOR_PROGRESS_START + max(0.0, min(100.0, progress)) * span / 100
            self.update_progress(job.id, scaled, message)

        return report

    def _page_result(self, job: Job, result: ExecutorResult) -> PageResult:
        return PageResult(
            job_id=job.id,
            batch_id=job.batch_id,
            url=job.url,
            page_title=job.page_title,
            page_depth=job.page_depth,
            test_type=job.test_type,
            violations=result.violations,
            passed=result.passed,
            incomplete=result.incomplete,
            inapplicable=result.inapplicable,
            detailed_violations=result.detailed_violations,
            timestamp=self.clock(),
        )

    def _complete(self, job: Job, result: ExecutorResult) -> None:
        self.update_progress(job.id, 100, "Test completed successfully")
        job.status = "completed"
        job.result = result
        self._finalize(job)
        job.performance_metrics = calculate_job_performance(job)
        self._completed[job.id] = job
        log.info(
            "Job %s completed in %.2fs: %d violations, %d passed",
            job.id,
            job.execution_time,
            result.violations,
            result.passed,
        )

    def _fail(self, job: Job, message: str) -> None:
        job.status = "failed"
        job.error = message
        self._finalize(job)
        self._failed[job.id] = job

    def _finalize(self, job: Job) -> None:
        job.completed_at = self.clock()
        start = job.started_at or job.created_at
        job.execution_time = (job.completed_at - start).total_seconds()
        del self._running[job.id]

    async def _finish_batch(self, batch: Batch) -> None:
        try:
            if self.on_batch_complete is not None:
                await self.on_batch_complete(batch)
        except Exception as e:
            log.error("Batch %s completion handler failed: %s", batch.id, e, exc_info=e)
        finally:
            batch.finished.set()
