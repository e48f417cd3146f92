"""Progress, estimate and analytics views derived from job state."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from a11y_orchestrator.models.job import JobStatus, Phase

type Confidence = Literal["low", "medium", "high"]

type Trend = Literal["improving", "degrading", "stable", "insufficient_data"]


@dataclass(frozen=True, kw_only=True)
class Milestone:
    """Progress threshold reached by a batch."""

    milestone: int
    timestamp: datetime
    completed_jobs: int
    elapsed: float


@dataclass(frozen=True, kw_only=True)
class TimeEstimate:
    """Advisory estimate of the time left before a batch finishes.

    ``estimate`` is None while no job has completed yet.
    """

    estimate: float | None
    formatted: str | None
    confidence: Confidence
    running_jobs: float = 0.0
    queued_jobs: float = 0.0
    avg_job_time: float = 0.0


@dataclass(frozen=True, kw_only=True)
class JobDuration:
    """Duration of a single completed job."""

    job_id: str
    test_type: str
    duration: float


@dataclass(frozen=True, kw_only=True)
class TestTypePerformance:
    """Duration statistics for completed jobs of one test type."""

    __test__ = False

    total_jobs: int
    total_duration: float
    avg_duration: float


@dataclass(frozen=True, kw_only=True)
class BatchPerformanceMetrics:
    """Throughput statistics over the completed jobs of a batch."""

    avg_job_duration: float
    fastest_job: JobDuration | None
    slowest_job: JobDuration | None
    jobs_per_minute: float
    test_type_performance: Mapping[str, TestTypePerformance]
    total_elapsed_time: float


@dataclass(frozen=True, kw_only=True)
class BatchPerformanceReport:
    """Final performance summary attached when a batch completes."""

    total_duration: float
    total_jobs: int
    successful_jobs: int
    failed_jobs: int
    average_job_duration: float
    throughput: float
    milestones: Sequence[Milestone]
    test_type_breakdown: Mapping[str, TestTypePerformance]
    efficiency: float


@dataclass(frozen=True, kw_only=True)
class TestTypeProgress:
    """Job counts and mean progress for one test type in a batch."""

    __test__ = False

    total: int
    queued: int
    running: int
    completed: int
    failed: int
    avg_progress: float
    completion_rate: float


@dataclass(frozen=True, kw_only=True)
class ErrorPattern:
    """Recurring failure message prefix."""

    pattern: str
    count: int


@dataclass(frozen=True, kw_only=True)
class ErrorAnalysis:
    """Summary of failed jobs in a batch."""

    total_errors: int
    errors_by_test_type: Mapping[str, int]
    common_errors: Sequence[ErrorPattern]
    error_rate: float


@dataclass(frozen=True, kw_only=True)
class PerformanceTrend:
    """Whether job durations shrink or grow over the course of a batch."""

    trend: Trend
    first_half_avg: float = 0.0
    second_half_avg: float = 0.0
    improvement_percentage: float = 0.0


@dataclass(frozen=True, kw_only=True)
class JobProgress:
    """Progress view of one job."""

    job_id: str
    url: str
    test_type: str
    status: JobStatus
    progress: float
    progress_message: str
    current_phase: Phase | None
    execution_time: float | None


@dataclass(frozen=True, kw_only=True)
class BatchProgress:
    """Detailed progress of a batch, including the time estimate."""

    batch_id: str
    name: str
    status: Literal["running", "completed"]
    progress: float
    total_jobs: int
    queued_jobs: int
    running_jobs: int
    completed_jobs: int
    failed_jobs: int
    elapsed: float
    elapsed_formatted: str
    estimated_time_remaining: TimeEstimate
    performance_metrics: BatchPerformanceMetrics
    milestones: Sequence[Milestone]
    jobs: Sequence[JobProgress]
    test_type_progress: Mapping[str, TestTypeProgress]


@dataclass(frozen=True, kw_only=True)
class BatchAnalytics:
    """Distribution, performance and error analytics for a batch."""

    batch_id: str
    status_distribution: Mapping[JobStatus, int]
    test_type_distribution: Mapping[str, int]
    progress_distribution: Mapping[str, int]
    performance_metrics: BatchPerformanceMetrics
    performance_trend: PerformanceTrend
    error_analysis: ErrorAnalysis
    concurrency_utilization: float
