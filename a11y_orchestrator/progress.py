"""Execution phases, job metrics and time-remaining estimates."""

from collections.abc import Sequence
from datetime import UTC, datetime

from a11y_orchestrator.models.analytics import Confidence, Milestone, TimeEstimate
from a11y_orchestrator.models.batch import Batch
from a11y_orchestrator.models.job import (
    Job,
    JobPerformanceMetrics,
    Phase,
    PhaseStats,
    ProgressEntry,
)

PHASE_THRESHOLDS: Sequence[tuple[float, Phase]] = (
    (20, "initialization"),
    (40, "page_loading"),
    (70, "test_execution"),
    (90, "result_processing"),
    (100, "finalization"),
)

MILESTONES: Sequence[int] = (25, 50, 75, 90, 100)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def determine_phase(progress: float) -> Phase:
    """Map a completion percentage to a coarse execution phase."""
    for threshold, phase in PHASE_THRESHOLDS:
        if progress < threshold:
            return phase
    return "completed"


def progress_entry(
    job: Job, progress: float, message: str, now: datetime
) -> ProgressEntry:
    """Build the history entry for a progress update of a job."""
    return ProgressEntry(
        timestamp=now,
        progress=progress,
        message=message,
        phase=determine_phase(progress),
        elapsed=(now - job.created_at).total_seconds(),
    )


def calculate_job_performance(job: Job) -> JobPerformanceMetrics:
    """Compute duration, phase breakdown and progress rate of a finished job."""
    history = job.progress_history
    start = job.started_at or job.created_at
    end = job.completed_at or (history[-1].timestamp if history else start)
    total_duration = (end - start).total_seconds()

    counts: dict[Phase, int] = {}
    durations: dict[Phase, float] = {}
    intervals: list[float] = []
    for index, entry in enumerate(history):
        counts[entry.phase] = counts.get(entry.phase, 0) + 1
        durations.setdefault(entry.phase, 0.0)
        if index > 0:
            interval = (entry.timestamp - history[index - 1].timestamp).total_seconds()
            durations[entry.phase] += interval
            intervals.append(interval)

    progress_rate = (
        100 / total_duration if len(history) > 1 and total_duration > 0 else 0.0
    )

    return JobPerformanceMetrics(
        total_duration=total_duration,
        phase_breakdown={
            phase: PhaseStats(count=counts[phase], duration=durations[phase])
            for phase in counts
        },
        avg_phase_duration=sum(intervals) / len(intervals) if intervals else 0.0,
        progress_rate=progress_rate,
    )


def estimate_confidence(completed_count: int) -> Confidence:
    """Confidence of an estimate based on how many jobs have completed."""
    if completed_count > 3:
        return "high"
    if completed_count > 1:
        return "medium"
    return "low"


def estimate_time_remaining(jobs: Sequence[Job], max_concurrent: int) -> TimeEstimate:
    """Estimate the time left for a batch from its completed job durations.

    Running jobs need the average duration scaled by their remaining progress;
    queued jobs are spread across the concurrency limit.
    """
    durations = [
        job.execution_time
        for job in jobs
        if job.status == "completed" and job.execution_time is not None
    ]
    if not durations:
        return TimeEstimate(estimate=None, formatted=None, confidence="low")

    avg_job_time = sum(durations) / len(durations)
    running_time = sum(
        avg_job_time * (100 - job.progress) / 100
        for job in jobs
        if job.status == "running"
    )
    queued_count = sum(1 for job in jobs if job.status == "queued")
    queued_time = queued_count * avg_job_time / max_concurrent
    total = running_time + queued_time

    return TimeEstimate(
        estimate=total,
        formatted=format_duration(total),
        confidence=estimate_confidence(len(durations)),
        running_jobs=running_time,
        queued_jobs=queued_time,
        avg_job_time=avg_job_time,
    )


def reached_milestones(batch: Batch, now: datetime) -> list[Milestone]:
    """Milestones the batch progress has passed but which are not yet recorded."""
    recorded = {milestone.milestone for milestone in batch.milestones}
    return [
        Milestone(
            milestone=threshold,
            timestamp=now,
            completed_jobs=batch.completed_jobs,
            elapsed=(now - batch.created_at).total_seconds(),
        )
        for threshold in MILESTONES
        if threshold not in recorded and batch.progress >= threshold
    ]


def format_duration(seconds: float) -> str:
    """Format a duration as "1h 2m", "3m 4s" or "5s"."""
    total_seconds = int(seconds)
    minutes, secs = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
