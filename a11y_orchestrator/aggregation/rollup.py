"""Grouping of page results by page and by test type."""

import math
from collections.abc import Mapping, Sequence

from a11y_orchestrator.models.report import PageRollup, ReportSummary, TestTypeMetrics
from a11y_orchestrator.models.result import PageResult


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def pass_rate(passed: int, violations: int) -> int:
    """Percentage of passed checks, 100 when nothing was checked."""
    total = passed + violations
    if total == 0:
        return 100
    return round_half_up(passed / total * 100)


def sort_results(results: Sequence[PageResult]) -> Sequence[PageResult]:
    """Order results so that aggregation does not depend on storage order."""
    return sorted(results, key=lambda r: (r.url, r.test_type, r.job_id))


def rollup_pages(results: Sequence[PageResult]) -> Sequence[PageRollup]:
    """Sum the results of every test run against each URL."""
    grouped: dict[str, list[PageResult]] = {}
    for result in results:
        grouped.setdefault(result.url, []).append(result)

    return [
        PageRollup(
            url=url,
            page_title=next((r.page_title for r in group if r.page_title), None),
            page_depth=group[0].page_depth,
            test_types=sorted({r.test_type for r in group}),
            total_violations=sum(r.violations for r in group),
            total_passed=sum(r.passed for r in group),
            total_incomplete=sum(r.incomplete for r in group),
        )
        for url, group in grouped.items()
    ]


def rollup_test_types(results: Sequence[PageResult]) -> Mapping[str, TestTypeMetrics]:
    """Sum the results of each test type across all pages."""
    grouped: dict[str, list[PageResult]] = {}
    for result in results:
        grouped.setdefault(result.test_type, []).append(result)

    metrics: dict[str, TestTypeMetrics] = {}
    for test_type in sorted(grouped):
        group = grouped[test_type]
        total_violations = sum(r.violations for r in group)
        metrics[test_type] = TestTypeMetrics(
            test_type=test_type,
            total_violations=total_violations,
            total_passed=sum(r.passed for r in group),
            total_incomplete=sum(r.incomplete for r in group),
            pages_completed=len(group),
            avg_violations_per_page=round(total_violations / len(group), 1),
        )
    return metrics


def summarize(
    results: Sequence[PageResult],
    pages: Sequence[PageRollup],
    test_type_metrics: Mapping[str, TestTypeMetrics],
) -> ReportSummary:
    """Headline totals of a batch."""
    total_violations = sum(r.violations for r in results)
    total_passed = sum(r.passed for r in results)
    return ReportSummary(
        total_pages=len(pages),
        total_tests=len(results),
        total_violations=total_violations,
        total_passed=total_passed,
        compliance_score=pass_rate(total_passed, total_violations),
        unique_test_types=len(test_type_metrics),
    )
