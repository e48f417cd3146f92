"""Pydantic models for scanner service API responses."""

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

type ScanStatus = Literal["queued", "running", "completed", "failed"]


class ScanReport(BaseModel):
    """Counts reported by the scanner for a finished scan."""

    model_config = ConfigDict(populate_by_name=True)

    violations: int = 0
    passed: int = 0
    incomplete: int = 0
    inapplicable: int = 0
    detailed_violations: Sequence[Mapping[str, Any]] = Field(
        default_factory=list, alias="detailedViolations"
    )


class ScanCreated(BaseModel):
    """Response from the create scan API."""

    id: str
    status: ScanStatus = "queued"


class Scan(BaseModel):
    """A scan from the scanner service API."""

    id: str
    status: ScanStatus
    progress: float | None = None
    error: str | None = None
    result: ScanReport | None = None
