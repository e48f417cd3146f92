"""Batch bookkeeping derived from the states of constituent jobs."""

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from a11y_orchestrator.analytics import (
    build_performance_report,
    calculate_batch_performance,
)
from a11y_orchestrator.errors import SubmissionError
from a11y_orchestrator.models.batch import Batch, BatchStatus
from a11y_orchestrator.models.job import Job
from a11y_orchestrator.progress import reached_milestones, utcnow

log = logging.getLogger(__name__)

DEFAULT_BATCH_NAME = "Unnamed Batch"


@dataclass(kw_only=True)
class BatchTracker:
    """Keeps batch counters in sync with the jobs of each batch.

    Counters are always recounted from job states, so their sum equals the
    number of jobs submitted to the batch. A batch completes once all of its
    jobs are terminal; ``claim_completion`` hands that transition out exactly
    once.
    """

    clock: Callable[[], datetime] = utcnow
    _batches: dict[str, Batch] = field(default_factory=dict, init=False)
    _jobs: dict[str, list[Job]] = field(default_factory=dict, init=False)

    def add_job(self, job: Job) -> Batch:
        """Attach a new job to its batch, creating the batch on first use."""
        batch = self._batches.get(job.batch_id)
        if batch is None:
            now = self.clock()
            batch = Batch(
                id=job.batch_id,
                name=job.batch_name or DEFAULT_BATCH_NAME,
                created_at=now,
                last_updated=now,
            )
            self._batches[job.batch_id] = batch
            self._jobs[job.batch_id] = []
            log.info("Batch %s created: %s", batch.id, batch.name)
        elif batch.status == "completed":
            raise SubmissionError(f"Batch '{job.batch_id}' has already completed")

        self._jobs[job.batch_id].append(job)
        return self.recompute(job.batch_id)

    def recompute(self, batch_id: str) -> Batch:
        """Recount a batch from its jobs and detect completion."""
        batch = self._batches[batch_id]
        jobs = self._jobs[batch_id]
        now = self.clock()

        statuses = Counter(job.status for job in jobs)
        batch.total_jobs = len(jobs)
        batch.queued_jobs = statuses["queued"]
        batch.running_jobs = statuses["running"]
        batch.completed_jobs = statuses["completed"]
        batch.failed_jobs = statuses["failed"]
        batch.progress = (
            sum(100 if job.is_terminal else job.progress for job in jobs) / len(jobs)
            if jobs
            else 0
        )
        batch.last_updated = now
        batch.milestones.extend(reached_milestones(batch, now))

        finished = batch.completed_jobs + batch.failed_jobs
        if batch.status == "running" and batch.total_jobs > 0 and finished == batch.total_jobs:
            batch.status = "completed"
            batch.completed_at = now
            metrics = calculate_batch_performance(jobs, batch, now)
            batch.performance_report = build_performance_report(batch, metrics)
            log.info(
                "Batch %s completed: %d succeeded, %d failed",
                batch.id,
                batch.completed_jobs,
                batch.failed_jobs,
            )

        return batch

    def claim_completion(self, batch_id: str) -> bool:
        """Return True exactly once for a completed batch."""
        batch = self._batches[batch_id]
        if batch.status != "completed" or batch.completion_handled:
            return False
        batch.completion_handled = True
        return True

    def get(self, batch_id: str) -> Batch | None:
        """Batch with the given id, if any job was submitted to it."""
        return self._batches.get(batch_id)

    def jobs(self, batch_id: str) -> Sequence[Job]:
        """Jobs submitted to a batch, in submission order."""
        return tuple(self._jobs.get(batch_id, ()))

    def status(self, batch_id: str) -> BatchStatus | None:
        """Counter snapshot of a batch."""
        batch = self._batches.get(batch_id)
        if batch is None:
            return None
        return BatchStatus(
            batch_id=batch.id,
            name=batch.name,
            status=batch.status,
            total=batch.total_jobs,
            queued=batch.queued_jobs,
            running=batch.running_jobs,
            completed=batch.completed_jobs,
            failed=batch.failed_jobs,
            progress=batch.progress,
        )
