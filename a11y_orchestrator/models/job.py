"""Job state and progress history records."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from a11y_orchestrator.models.result import ExecutorResult

type JobStatus = Literal["queued", "running", "completed", "failed"]

type Phase = Literal[
    "initialization",
    "page_loading",
    "test_execution",
    "result_processing",
    "finalization",
    "completed",
]

TERMINAL_STATUSES: frozenset[JobStatus] = frozenset(["completed", "failed"])


@dataclass(frozen=True, kw_only=True)
class ProgressEntry:
    """Single progress update appended to a job's history."""

    timestamp: datetime
    progress: float
    message: str
    phase: Phase
    elapsed: float


@dataclass(frozen=True, kw_only=True)
class PhaseStats:
    """Number of history entries and time spent in one phase."""

    count: int
    duration: float


@dataclass(frozen=True, kw_only=True)
class JobPerformanceMetrics:
    """Execution metrics computed when a job completes."""

    total_duration: float
    phase_breakdown: Mapping[Phase, PhaseStats]
    avg_phase_duration: float
    progress_rate: float


@dataclass(kw_only=True)
class Job:
    """One (URL, test type) unit of work within a batch.

    Owned by the job queue: only the queue changes status, progress and
    timestamps. Once completed or failed the job is never touched again.
    """

    id: str
    batch_id: str
    url: str
    test_type: str
    created_at: datetime
    batch_name: str | None = None
    page_title: str | None = None
    page_depth: int = 0
    status: JobStatus = "queued"
    progress: float = 0
    progress_message: str = ""
    progress_history: list[ProgressEntry] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    execution_time: float | None = None
    performance_metrics: JobPerformanceMetrics | None = None
    error: str | None = None
    result: ExecutorResult | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the job reached completed or failed."""
        return self.status in TERMINAL_STATUSES

    @property
    def current_phase(self) -> Phase | None:
        """Phase of the latest progress update, if any."""
        return self.progress_history[-1].phase if self.progress_history else None
