"""Batch bookkeeping records."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import Field

from a11y_orchestrator.models.analytics import BatchPerformanceReport, Milestone
from a11y_orchestrator.models.base import Model

type BatchState = Literal["running", "completed"]


@dataclass(kw_only=True)
class Batch:
    """Derived view over every job sharing a batch id.

    Counters are recomputed from job states by the batch tracker and are never
    set from anywhere else.
    """

    id: str
    name: str
    created_at: datetime
    last_updated: datetime
    status: BatchState = "running"
    total_jobs: int = 0
    queued_jobs: int = 0
    running_jobs: int = 0
    completed_jobs: int = 0
    failed_jobs: int = 0
    progress: float = 0
    completed_at: datetime | None = None
    milestones: list[Milestone] = field(default_factory=list)
    performance_report: BatchPerformanceReport | None = None
    completion_handled: bool = field(default=False, repr=False)
    finished: asyncio.Event = field(
        default_factory=asyncio.Event, repr=False, compare=False
    )


class BatchStatus(Model):
    """Counter snapshot exposed to callers."""

    batch_id: str
    name: str
    status: BatchState
    total: int = Field(..., description="Jobs submitted to the batch")
    queued: int
    running: int
    completed: int
    failed: int
    progress: float = Field(..., description="Mean job progress (0-100)")
