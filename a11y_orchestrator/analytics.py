"""Performance and error analytics over the jobs of a batch."""

from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import datetime

from a11y_orchestrator.models.analytics import (
    BatchPerformanceMetrics,
    BatchPerformanceReport,
    ErrorAnalysis,
    ErrorPattern,
    JobDuration,
    PerformanceTrend,
    TestTypePerformance,
    TestTypeProgress,
)
from a11y_orchestrator.models.batch import Batch
from a11y_orchestrator.models.job import Job, JobStatus

ERROR_PATTERN_LENGTH = 100
COMMON_ERRORS_LIMIT = 5


def calculate_batch_performance(
    jobs: Sequence[Job], batch: Batch, now: datetime
) -> BatchPerformanceMetrics:
    """Average, fastest and slowest job durations and throughput."""
    completed = [job for job in jobs if job.status == "completed"]
    elapsed = ((batch.completed_at or now) - batch.created_at).total_seconds()

    if not completed:
        return BatchPerformanceMetrics(
            avg_job_duration=0.0,
            fastest_job=None,
            slowest_job=None,
            jobs_per_minute=0.0,
            test_type_performance={},
            total_elapsed_time=elapsed,
        )

    durations = [
        JobDuration(
            job_id=job.id,
            test_type=job.test_type,
            duration=job.execution_time or 0.0,
        )
        for job in completed
    ]

    totals: dict[str, list[float]] = {}
    for duration in durations:
        totals.setdefault(duration.test_type, []).append(duration.duration)

    elapsed_minutes = elapsed / 60
    return BatchPerformanceMetrics(
        avg_job_duration=sum(d.duration for d in durations) / len(durations),
        fastest_job=min(durations, key=lambda d: d.duration),
        slowest_job=max(durations, key=lambda d: d.duration),
        jobs_per_minute=len(completed) / elapsed_minutes if elapsed_minutes > 0 else 0.0,
        test_type_performance={
            test_type: TestTypePerformance(
                total_jobs=len(values),
                total_duration=sum(values),
                avg_duration=sum(values) / len(values),
            )
            for test_type, values in totals.items()
        },
        total_elapsed_time=elapsed,
    )


def build_performance_report(
    batch: Batch, metrics: BatchPerformanceMetrics
) -> BatchPerformanceReport:
    """Final summary attached to a batch once every job finished."""
    end = batch.completed_at or batch.last_updated
    return BatchPerformanceReport(
        total_duration=(end - batch.created_at).total_seconds(),
        total_jobs=batch.total_jobs,
        successful_jobs=batch.completed_jobs,
        failed_jobs=batch.failed_jobs,
        average_job_duration=metrics.avg_job_duration,
        throughput=metrics.jobs_per_minute,
        milestones=list(batch.milestones),
        test_type_breakdown=metrics.test_type_performance,
        efficiency=(
            batch.completed_jobs / batch.total_jobs * 100 if batch.total_jobs else 0.0
        ),
    )


def calculate_test_type_progress(jobs: Sequence[Job]) -> Mapping[str, TestTypeProgress]:
    """Job counts and mean progress grouped by test type."""
    grouped: dict[str, list[Job]] = {}
    for job in jobs:
        grouped.setdefault(job.test_type, []).append(job)

    progress: dict[str, TestTypeProgress] = {}
    for test_type, group in grouped.items():
        statuses = Counter(job.status for job in group)
        progress[test_type] = TestTypeProgress(
            total=len(group),
            queued=statuses["queued"],
            running=statuses["running"],
            completed=statuses["completed"],
            failed=statuses["failed"],
            avg_progress=sum(job.progress for job in group) / len(group),
            completion_rate=statuses["completed"] / len(group) * 100,
        )
    return progress


def distribution_by_status(jobs: Sequence[Job]) -> Mapping[JobStatus, int]:
    """Number of jobs in each state."""
    distribution: dict[JobStatus, int] = {
        "queued": 0,
        "running": 0,
        "completed": 0,
        "failed": 0,
    }
    for job in jobs:
        distribution[job.status] += 1
    return distribution


def distribution_by_test_type(jobs: Sequence[Job]) -> Mapping[str, int]:
    """Number of jobs per test type."""
    return dict(Counter(job.test_type for job in jobs))


def distribution_by_progress(jobs: Sequence[Job]) -> Mapping[str, int]:
    """Number of jobs per progress band."""
    ranges = {"0-25%": 0, "26-50%": 0, "51-75%": 0, "76-99%": 0, "100%": 0}
    for job in jobs:
        if job.progress >= 100:
            ranges["100%"] += 1
        elif job.progress > 75:
            ranges["76-99%"] += 1
        elif job.progress > 50:
            ranges["51-75%"] += 1
        elif job.progress > 25:
            ranges["26-50%"] += 1
        else:
            ranges["0-25%"] += 1
    return ranges


def calculate_performance_trend(jobs: Sequence[Job]) -> PerformanceTrend:
    """Compare durations of the first and second half of completed jobs."""
    finished = sorted(
        (
            job
            for job in jobs
            if job.status == "completed"
            and job.execution_time is not None
            and job.completed_at is not None
        ),
        key=lambda job: job.completed_at,  # type: ignore[arg-type, return-value]
    )
    if len(finished) < 2:
        return PerformanceTrend(trend="insufficient_data")

    middle = len(finished) // 2
    first = [job.execution_time or 0.0 for job in finished[:middle]]
    second = [job.execution_time or 0.0 for job in finished[middle:]]
    first_avg = sum(first) / len(first)
    second_avg = sum(second) / len(second)

    if second_avg < first_avg:
        trend = "improving"
    elif second_avg > first_avg:
        trend = "degrading"
    else:
        trend = "stable"

    return PerformanceTrend(
        trend=trend,
        first_half_avg=first_avg,
        second_half_avg=second_avg,
        improvement_percentage=(
            (first_avg - second_avg) / first_avg * 100 if first_avg > 0 else 0.0
        ),
    )


def analyze_errors(jobs: Sequence[Job]) -> ErrorAnalysis:
    """Group failed jobs by test type and by error message prefix."""
    failed = [job for job in jobs if job.status == "failed"]
    if not failed:
        return ErrorAnalysis(
            total_errors=0, errors_by_test_type={}, common_errors=[], error_rate=0.0
        )

    patterns = Counter(
        (job.error or "Unknown error")[:ERROR_PATTERN_LENGTH] for job in failed
    )
    return ErrorAnalysis(
        total_errors=len(failed),
        errors_by_test_type=dict(Counter(job.test_type for job in failed)),
        common_errors=[
            ErrorPattern(pattern=pattern, count=count)
            for pattern, count in patterns.most_common(COMMON_ERRORS_LIMIT)
        ],
        error_rate=len(failed) / len(jobs) * 100,
    )


def concurrency_utilization(
    batch: Batch,
    metrics: BatchPerformanceMetrics,
    max_concurrent: int,
    now: datetime,
) -> float:
    """Share of the available worker time actually spent running jobs."""
    duration = ((batch.completed_at or now) - batch.created_at).total_seconds()
    available = duration * max_concurrent
    used = metrics.avg_job_duration * batch.total_jobs
    return used / available * 100 if available > 0 else 0.0
