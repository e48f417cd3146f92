"""Tests for phase detection, job metrics and time estimates."""

from datetime import timedelta

import pytest

from a11y_orchestrator.models.batch import Batch
from a11y_orchestrator.models.job import ProgressEntry
from a11y_orchestrator.progress import (
    calculate_job_performance,
    determine_phase,
    estimate_confidence,
    estimate_time_remaining,
    format_duration,
    progress_entry,
    reached_milestones,
)
from a11y_orchestrator.testing.factories import FIXED_TIME, JobFactory


@pytest.mark.parametrize(
    ("progress", "phase"),
    [
        (0, "initialization"),
        (19.9, "initialization"),
        (20, "page_loading"),
        (39, "page_loading"),
        (40, "test_execution"),
        (69, "test_execution"),
        (70, "result_processing"),
        (89, "result_processing"),
        (90, "finalization"),
        (99.9, "finalization"),
        (100, "completed"),
    ],
)
def test_determine_phase(progress: float, phase: str) -> None:
    """Maps progress percentages to execution phases."""
    assert determine_phase(progress) == phase


def test_progress_entry_records_elapsed_since_creation() -> None:
    """History entries carry the phase and seconds since job creation."""
    job = JobFactory.build(created_at=FIXED_TIME)

    entry = progress_entry(job, 50, "Scanning", FIXED_TIME + timedelta(seconds=12))

    assert entry.phase == "test_execution"
    assert entry.elapsed == 12
    assert entry.message == "Scanning"


def _entry(seconds: float, progress: float) -> ProgressEntry:
    return ProgressEntry(
        timestamp=FIXED_TIME + timedelta(seconds=seconds),
        progress=progress,
        message="",
        phase=determine_phase(progress),
        elapsed=seconds,
    )


def test_calculate_job_performance() -> None:
    """Computes duration, phase breakdown and progress rate."""
    job = JobFactory.build(
        status="completed",
        started_at=FIXED_TIME,
        completed_at=FIXED_TIME + timedelta(seconds=10),
        progress_history=[_entry(0, 10), _entry(4, 90), _entry(10, 100)],
    )

    metrics = calculate_job_performance(job)

    assert metrics.total_duration == 10
    assert metrics.avg_phase_duration == 5
    assert metrics.progress_rate == 10
    assert metrics.phase_breakdown["initialization"].count == 1
    assert metrics.phase_breakdown["initialization"].duration == 0
    assert metrics.phase_breakdown["finalization"].duration == 4
    assert metrics.phase_breakdown["completed"].duration == 6


def test_calculate_job_performance_single_entry_has_zero_rate() -> None:
    """Progress rate is zero with a single history entry."""
    job = JobFactory.build(
        started_at=FIXED_TIME,
        completed_at=FIXED_TIME + timedelta(seconds=3),
        progress_history=[_entry(0, 10)],
    )

    metrics = calculate_job_performance(job)

    assert metrics.progress_rate == 0
    assert metrics.avg_phase_duration == 0


@pytest.mark.parametrize(
    ("completed", "confidence"),
    [(0, "low"), (1, "low"), (2, "medium"), (3, "medium"), (4, "high")],
)
def test_estimate_confidence(completed: int, confidence: str) -> None:
    """Confidence grows with the number of completed jobs."""
    assert estimate_confidence(completed) == confidence


def test_estimate_time_remaining_unknown_without_completed_jobs() -> None:
    """No estimate is possible before any job completes."""
    jobs = [JobFactory.build(status="running", progress=50)]

    estimate = estimate_time_remaining(jobs, max_concurrent=2)

    assert estimate.estimate is None
    assert estimate.formatted is None
    assert estimate.confidence == "low"


def test_estimate_time_remaining() -> None:
    """Scales running jobs by remaining progress and spreads queued jobs."""
    jobs = [
        JobFactory.build(status="completed", execution_time=20),
        JobFactory.build(status="completed", execution_time=40),
        JobFactory.build(status="running", progress=50),
        JobFactory.build(status="queued"),
        JobFactory.build(status="queued"),
    ]

    estimate = estimate_time_remaining(jobs, max_concurrent=2)

    assert estimate.avg_job_time == 30
    assert estimate.running_jobs == 15
    assert estimate.queued_jobs == 30
    assert estimate.estimate == 45
    assert estimate.formatted == "45s"
    assert estimate.confidence == "medium"


def test_reached_milestones_records_each_threshold_once() -> None:
    """Returns thresholds crossed since the last recorded milestone."""
    batch = Batch(
        id="batch-1",
        name="Site",
        created_at=FIXED_TIME,
        last_updated=FIXED_TIME,
        progress=60,
        completed_jobs=3,
    )
    now = FIXED_TIME + timedelta(seconds=30)

    first = reached_milestones(batch, now)
    batch.milestones.extend(first)
    second = reached_milestones(batch, now)

    assert [m.milestone for m in first] == [25, 50]
    assert first[0].completed_jobs == 3
    assert first[0].elapsed == 30
    assert second == []


@pytest.mark.parametrize(
    ("seconds", "formatted"),
    [(5, "5s"), (184, "3m 4s"), (3720, "1h 2m"), (0, "0s")],
)
def test_format_duration(seconds: float, formatted: str) -> None:
    """Formats durations compactly."""
    assert format_duration(seconds) == formatted
