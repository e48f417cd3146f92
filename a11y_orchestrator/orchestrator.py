"""Batch orchestrator: submission, status and aggregation entry points."""

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self

from pydantic import ValidationError

from a11y_orchestrator import analytics
from a11y_orchestrator.aggregation.aggregator import ComplianceAggregator
from a11y_orchestrator.config import OrchestratorConfig
from a11y_orchestrator.errors import AggregationDataMissingError, SubmissionError
from a11y_orchestrator.executors.registry import ExecutorRegistry
from a11y_orchestrator.job_queue import JobQueue, QueueStatus
from a11y_orchestrator.models.analytics import BatchAnalytics, BatchProgress, JobProgress
from a11y_orchestrator.models.batch import Batch, BatchStatus
from a11y_orchestrator.models.job import Job
from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.models.result import PageResult
from a11y_orchestrator.models.submission import (
    BatchDefinition,
    PageSpec,
    SubmissionResult,
)
from a11y_orchestrator.progress import estimate_time_remaining, format_duration, utcnow
from a11y_orchestrator.store.base import ResultStore
from a11y_orchestrator.tracker import BatchTracker

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class BatchOrchestrator:
    """Facade over the job queue, batch tracker and compliance aggregator.

    When the last job of a batch finishes, the batch is aggregated once and
    the report saved to the result store.
    """

    queue: JobQueue
    aggregator: ComplianceAggregator
    config: OrchestratorConfig
    clock: Callable[[], datetime] = utcnow

    @classmethod
    def create(
        cls,
        registry: ExecutorRegistry,
        store: ResultStore,
        config: OrchestratorConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> Self:
        """Wire a queue, tracker and aggregator around the given store."""
        config = config or OrchestratorConfig()
        queue = JobQueue(
            registry=registry,
            store=store,
            tracker=BatchTracker(clock=clock),
            max_concurrent=config.max_concurrent,
            job_timeout=config.job_timeout,
            clock=clock,
        )
        orchestrator = cls(
            queue=queue,
            aggregator=ComplianceAggregator(store=store, config=config.scoring),
            config=config,
            clock=clock,
        )
        queue.on_batch_complete = orchestrator._aggregate_finished_batch
        return orchestrator

    @property
    def tracker(self) -> BatchTracker:
        return self.queue.tracker

    @property
    def store(self) -> ResultStore:
        return self.queue.store

    def submit_batch(
        self,
        pages: Sequence[PageSpec | Mapping[str, Any]],
        test_types: Sequence[str],
        batch_name: str | None = None,
        batch_id: str | None = None,
    ) -> SubmissionResult:
        """Queue one job per (page, test type) combination.

        Raises:
            SubmissionError: If pages or test types are empty, a page is
                malformed (no url, unknown keys), a test type is unknown or
                the batch already completed. No job is created.

        """
        try:
            definition = BatchDefinition.model_validate(
                {"name": batch_name, "test_types": test_types, "pages": pages}
            )
        except ValidationError as e:
            raise SubmissionError(f"Invalid batch submission: {e}") from e
        return self.submit_definition(definition, batch_id)

    def submit_definition(
        self, definition: BatchDefinition, batch_id: str | None = None
    ) -> SubmissionResult:
        """Queue the jobs of a batch definition."""
        if not definition.pages:
            raise SubmissionError("At least one page is required")
        if not definition.test_types:
            raise SubmissionError("At least one test type is required")
        for test_type in definition.test_types:
            self.queue.registry.get(test_type)

        batch_id = batch_id or f"batch-{uuid.uuid4().hex}"
        existing = self.tracker.get(batch_id)
        if existing is not None and existing.status == "completed":
            raise SubmissionError(f"Batch '{batch_id}' has already completed")

        submitted = {(job.url, job.test_type) for job in self.tracker.jobs(batch_id)}
        job_ids = [
            self.queue.submit(
                spec.url,
                spec.test_type,
                batch_id,
                batch_name=definition.name,
                page_title=spec.title,
                page_depth=spec.depth,
            )
            for spec in definition.to_job_specs()
            if (spec.url, spec.test_type) not in submitted
        ]
        log.info(
            "Batch %s submitted: %d job(s) for %d test type(s)",
            batch_id,
            len(job_ids),
            len(set(definition.test_types)),
        )
        return SubmissionResult(batch_id=batch_id, job_ids=job_ids)

    def get_batch_status(self, batch_id: str) -> BatchStatus | None:
        """Counter snapshot of a batch, None if unknown."""
        return self.tracker.status(batch_id)

    def get_job(self, job_id: str) -> Job | None:
        """Copy of a job in any state, None if unknown."""
        return self.queue.get_job(job_id)

    def get_queue_status(self) -> QueueStatus:
        """Snapshot of every job in the queue."""
        return self.queue.get_status()

    async def get_page_results(self, batch_id: str) -> Sequence[PageResult]:
        """Stored page results of a batch, ordered by URL and test type."""
        results = await self.store.list_page_results(batch_id)
        return sorted(results, key=lambda r: (r.url, r.test_type, r.job_id))

    async def get_aggregation(self, batch_id: str) -> ComplianceReport | None:
        """Latest stored compliance report of a batch, None if there is none."""
        return await self.store.get_report(batch_id)

    async def force_aggregate(self, batch_id: str) -> ComplianceReport | None:
        """Rebuild the report from whatever page results are stored now.

        Returns None when the batch has no page results.
        """
        batch = self.tracker.get(batch_id)
        try:
            return await self.aggregator.aggregate(batch_id, batch.name if batch else None)
        except AggregationDataMissingError as e:
            log.warning("Cannot aggregate batch %s: %s", batch_id, e)
            return None

    async def wait_for_batch(
        self, batch_id: str, timeout: float | None = None
    ) -> BatchStatus | None:
        """Wait until a batch completed and its report was handled.

        Raises:
            TimeoutError: If the batch does not finish within ``timeout`` seconds

        """
        batch = self.tracker.get(batch_id)
        if batch is None:
            return None
        async with asyncio.timeout(timeout):
            await batch.finished.wait()
        return self.tracker.status(batch_id)

    def get_batch_progress(self, batch_id: str) -> BatchProgress | None:
        """Detailed progress of a batch including a time-remaining estimate."""
        batch = self.tracker.get(batch_id)
        if batch is None:
            return None

        now = self.clock()
        jobs = self.tracker.jobs(batch_id)
        elapsed = ((batch.completed_at or now) - batch.created_at).total_seconds()
        return BatchProgress(
            batch_id=batch.id,
            name=batch.name,
            status=batch.status,
            progress=batch.progress,
            total_jobs=batch.total_jobs,
            queued_jobs=batch.queued_jobs,
            running_jobs=batch.running_jobs,
            completed_jobs=batch.completed_jobs,
            failed_jobs=batch.failed_jobs,
            elapsed=elapsed,
            elapsed_formatted=format_duration(elapsed),
            estimated_time_remaining=estimate_time_remaining(
                jobs, self.config.max_concurrent
            ),
            performance_metrics=analytics.calculate_batch_performance(jobs, batch, now),
            milestones=list(batch.milestones),
            jobs=[
                JobProgress(
                    job_id=job.id,
                    url=job.url,
                    test_type=job.test_type,
                    status=job.status,
                    progress=job.progress,
                    progress_message=job.progress_message,
                    current_phase=job.current_phase,
                    execution_time=job.execution_time,
                )
                for job in jobs
            ],
            test_type_progress=analytics.calculate_test_type_progress(jobs),
        )

    def get_batch_analytics(self, batch_id: str) -> BatchAnalytics | None:
        """Distributions, performance trend and error analysis of a batch."""
        batch = self.tracker.get(batch_id)
        if batch is None:
            return None

        now = self.clock()
        jobs = self.tracker.jobs(batch_id)
        metrics = analytics.calculate_batch_performance(jobs, batch, now)
        return BatchAnalytics(
            batch_id=batch.id,
            status_distribution=analytics.distribution_by_status(jobs),
            test_type_distribution=analytics.distribution_by_test_type(jobs),
            progress_distribution=analytics.distribution_by_progress(jobs),
            performance_metrics=metrics,
            performance_trend=analytics.calculate_performance_trend(jobs),
            error_analysis=analytics.analyze_errors(jobs),
            concurrency_utilization=analytics.concurrency_utilization(
                batch, metrics, self.config.max_concurrent, now
            ),
        )

    async def _aggregate_finished_batch(self, batch: Batch) -> None:
        try:
            await self.aggregator.aggregate(batch.id, batch.name)
        except AggregationDataMissingError:
            log.warning(
                "Batch %s finished without page results; no report generated", batch.id
            )
