"""Models for test executor output and persisted per-job results."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import Field

from a11y_orchestrator.models.base import Model


class ExecutorResult(Model):
    """Normalized outcome of one test type run against one URL."""

    violations: int = Field(default=0, ge=0, description="Failed checks")
    passed: int = Field(default=0, ge=0, description="Passed checks")
    incomplete: int = Field(default=0, ge=0, description="Checks needing review")
    inapplicable: int = Field(default=0, ge=0, description="Checks not applicable")
    detailed_violations: Sequence[Mapping[str, Any]] = Field(
        default_factory=list, description="Tool-specific violation details"
    )

    @property
    def success_rate(self) -> int:
        """Percentage of passed checks, 100 when nothing was checked."""
        total = self.violations + self.passed + self.incomplete
        return round(self.passed / total * 100) if total else 100


class PageResult(Model):
    """One persisted record per finished job.

    Written once and never mutated; the source of truth for aggregation.
    """

    job_id: str
    batch_id: str
    url: str
    page_title: str | None = None
    page_depth: int = 0
    test_type: str
    violations: int = 0
    passed: int = 0
    incomplete: int = 0
    inapplicable: int = 0
    detailed_violations: Sequence[Mapping[str, Any]] = Field(default_factory=list)
    timestamp: datetime
