"""Tests for SQL result store on SQLite."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path

import pytest

from a11y_orchestrator import catalogue
from a11y_orchestrator.aggregation.aggregator import ComplianceAggregator
from a11y_orchestrator.store.base import ResultExistsError
from a11y_orchestrator.store.factory import open_result_store
from a11y_orchestrator.store.memory import MemoryResultStore
from a11y_orchestrator.store.sql import SqlResultStore
from a11y_orchestrator.testing.factories import FIXED_TIME, PageResultFactory


@pytest.fixture
async def store(tmp_path: Path) -> AsyncGenerator[SqlResultStore]:
    """Create SQL store backed by a temporary SQLite file."""
    async with SqlResultStore.from_url(
        f"sqlite+aiosqlite:///{tmp_path / 'results.db'}"
    ) as sql_store:
        yield sql_store


async def test_save_and_get_page_result(store: SqlResultStore) -> None:
    """Round-trips a page result including its violation details."""
    page_result = PageResultFactory.build(
        batch_id="batch-1",
        job_id="job-1",
        violations=2,
        detailed_violations=[{"id": "color-contrast", "nodes": 3}],
    )

    await store.save_page_result(page_result)

    assert await store.get_page_result("batch-1", "job-1") == page_result
    assert await store.get_page_result("batch-1", "job-2") is None


async def test_list_page_results_by_batch(store: SqlResultStore) -> None:
    """Lists only the results of the requested batch."""
    first = PageResultFactory.build(batch_id="batch-1", job_id="job-1")
    second = PageResultFactory.build(
        batch_id="batch-1", job_id="job-2", timestamp=FIXED_TIME + timedelta(seconds=5)
    )
    other = PageResultFactory.build(batch_id="batch-2", job_id="job-3")
    for page_result in (second, other, first):
        await store.save_page_result(page_result)

    results = await store.list_page_results("batch-1")

    assert sorted(r.job_id for r in results) == ["job-1", "job-2"]
    assert await store.list_page_results("batch-3") == []


async def test_save_page_result_rejects_duplicates(store: SqlResultStore) -> None:
    """A page result is written once per job."""
    page_result = PageResultFactory.build(batch_id="batch-1", job_id="job-1")
    await store.save_page_result(page_result)

    with pytest.raises(ResultExistsError):
        await store.save_page_result(page_result)


async def test_save_report_replaces_previous(store: SqlResultStore) -> None:
    """The latest saved report of a batch wins."""
    aggregator = ComplianceAggregator(store=store)
    await store.save_page_result(
        PageResultFactory.build(
            batch_id="batch-1",
            job_id="job-1",
            url="https://example.com/",
            test_type=catalogue.AXE,
            violations=4,
            passed=6,
        )
    )
    first = await aggregator.aggregate("batch-1", "First")
    second = await aggregator.aggregate("batch-1", "Second")

    stored = await store.get_report("batch-1")

    assert first.batch_name == "First"
    assert stored == second
    assert await store.get_report("batch-2") is None


async def test_results_survive_reopening(tmp_path: Path) -> None:
    """Results are durable across store instances."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'durable.db'}"
    page_result = PageResultFactory.build(batch_id="batch-1", job_id="job-1")

    async with SqlResultStore.from_url(url) as first:
        await first.save_page_result(page_result)

    async with SqlResultStore.from_url(url) as second:
        assert await second.list_page_results("batch-1") == [page_result]


async def test_open_result_store_selects_backend(tmp_path: Path) -> None:
    """Uses SQL with a database URL and memory otherwise."""
    async with open_result_store(None) as memory:
        assert isinstance(memory, MemoryResultStore)

    url = f"sqlite+aiosqlite:///{tmp_path / 'factory.db'}"
    async with open_result_store(url) as sql:
        assert isinstance(sql, SqlResultStore)
