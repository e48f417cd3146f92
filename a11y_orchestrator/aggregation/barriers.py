"""Critical barrier detection and page ranking."""

from collections.abc import Mapping, Sequence

from a11y_orchestrator import catalogue
from a11y_orchestrator.aggregation.rollup import pass_rate
from a11y_orchestrator.aggregation.scoring import compliance_grade
from a11y_orchestrator.config import ScoringConfig
from a11y_orchestrator.models.report import (
    CriticalBarrier,
    PageRanking,
    PageRollup,
    Severity,
    TestTypeMetrics,
)

SEVERITY_ORDER: Mapping[Severity, int] = {"critical": 0, "major": 1, "minor": 2}


def identify_critical_barriers(
    pages: Sequence[PageRollup],
    test_type_metrics: Mapping[str, TestTypeMetrics],
    config: ScoringConfig,
) -> Sequence[CriticalBarrier]:
    """Pages with many violations and test types failing across the site."""
    barriers: list[CriticalBarrier] = []

    for page in pages:
        if page.total_violations > config.page_barrier_violations:
            barriers.append(
                CriticalBarrier(
                    type="high_violation_count",
                    severity="critical",
                    page=page.url,
                    page_title=page.page_title,
                    count=page.total_violations,
                    description=(
                        f"Page has {page.total_violations} accessibility violations"
                    ),
                    impact="High - Multiple barriers prevent access to content",
                )
            )

    for test_type, metrics in test_type_metrics.items():
        avg = metrics.avg_violations_per_page
        if avg > config.systematic_issue_avg:
            name = catalogue.display_name(test_type)
            barriers.append(
                CriticalBarrier(
                    type="systematic_issue",
                    severity="critical" if avg > config.systematic_critical_avg else "major",
                    test_type=test_type,
                    test_name=name,
                    average_violations=avg,
                    pages_affected=metrics.pages_completed,
                    description=(
                        f"{name} shows consistent issues across pages "
                        f"(avg {avg:g} violations per page)"
                    ),
                    impact=catalogue.impact_description(test_type, avg),
                )
            )

    return sorted(barriers, key=lambda barrier: SEVERITY_ORDER[barrier.severity])


def rank_pages(
    pages: Sequence[PageRollup], config: ScoringConfig
) -> Sequence[PageRanking]:
    """Score every page and order them worst first."""
    rankings = []
    for page in pages:
        score = pass_rate(page.total_passed, page.total_violations)
        rankings.append(
            PageRanking(
                url=page.url,
                page_title=page.page_title,
                compliance_score=score,
                grade=compliance_grade(score),
                total_violations=page.total_violations,
                total_passed=page.total_passed,
                tests_performed=len(page.test_types),
                needs_attention=(
                    score < config.page_attention_score
                    or page.total_violations > config.page_attention_violations
                ),
            )
        )
    return sorted(rankings, key=lambda ranking: ranking.compliance_score)
