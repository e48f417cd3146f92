"""Coverage analysis, remediation recommendations and risk assessment."""

from collections.abc import Mapping, Sequence

from a11y_orchestrator import catalogue
from a11y_orchestrator.aggregation.rollup import round_half_up
from a11y_orchestrator.aggregation.scoring import coverage_grade
from a11y_orchestrator.config import ScoringConfig
from a11y_orchestrator.models.report import (
    CoverageAnalysis,
    CriticalBarrier,
    Effort,
    ImprovementPotential,
    MissingTest,
    PageRanking,
    Priority,
    Recommendation,
    RiskAssessment,
    RiskLevel,
    TestTypeMetrics,
    WcagCompliance,
)

PRIORITY_ORDER: Mapping[Priority, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}

RECOMMENDED_ACTIONS: Mapping[RiskLevel, str] = {
    "critical": (
        "Immediate remediation required. "
        "Consider accessibility audit and expert consultation."
    ),
    "high": (
        "Prioritize accessibility improvements. "
        "Develop remediation plan within 30 days."
    ),
    "medium": (
        "Schedule accessibility improvements. Review and fix issues within 90 days."
    ),
    "low": "Continue monitoring. Address remaining issues in next development cycle.",
}

PAGE_ACTIONS: Sequence[str] = (
    "Review page structure and semantics",
    "Fix color contrast and visual design issues",
    "Ensure proper form labeling",
    "Test keyboard navigation flow",
)

GOOD_COVERAGE = 75
CRITICAL_BARRIER_POINTS = 8
SYSTEMATIC_ISSUE_POINTS = 5


def analyze_coverage(test_type_metrics: Mapping[str, TestTypeMetrics]) -> CoverageAnalysis:
    """Compare the executed test types against the catalogue."""
    executed = [key for key in catalogue.TEST_TYPES if key in test_type_metrics]
    total = len(catalogue.TEST_TYPES)
    coverage = round_half_up(len(executed) / total * 100)

    return CoverageAnalysis(
        coverage_percentage=coverage,
        executed_test_types=len(executed),
        total_available_test_types=total,
        missing_tests=[
            MissingTest(
                test_type=key,
                name=catalogue.display_name(key),
                importance=catalogue.importance(key),
            )
            for key in catalogue.TEST_TYPES
            if key not in test_type_metrics
        ],
        comprehensiveness_grade=coverage_grade(coverage),
        recommendation=(
            "Consider running additional test types for more comprehensive analysis"
            if coverage < GOOD_COVERAGE
            else "Good test coverage achieved"
        ),
    )


def generate_recommendations(
    rankings: Sequence[PageRanking],
    test_type_metrics: Mapping[str, TestTypeMetrics],
    wcag: WcagCompliance,
    config: ScoringConfig,
) -> Sequence[Recommendation]:
    """Prioritized remediation guidance for the batch.

    ``rankings`` must be ordered worst page first.
    """
    recommendations: list[Recommendation] = []

    if wcag.overall_score < config.level_a_threshold:
        recommendations.append(
            Recommendation(
                priority="critical",
                category="overall_compliance",
                title="Immediate Accessibility Remediation Required",
                description=(
                    "Your site currently does not meet WCAG Level A standards. "
                    "Immediate action is required."
                ),
                actions=[
                    "Audit all pages for basic accessibility compliance",
                    "Fix color contrast issues immediately",
                    "Ensure all interactive elements are keyboard accessible",
                    "Add proper heading structure and alt text",
                ],
                estimated_effort="high",
                expected_impact="high",
            )
        )
    elif wcag.overall_score < config.level_aa_threshold:
        recommendations.append(
            Recommendation(
                priority="high",
                category="overall_compliance",
                title="Work Towards WCAG Level AA Compliance",
                description=(
                    "Your site meets basic accessibility standards but needs "
                    "improvement for Level AA compliance."
                ),
                actions=[
                    "Review and fix remaining accessibility violations",
                    "Improve form labeling and error handling",
                    "Enhance keyboard navigation flow",
                    "Test with actual assistive technology users",
                ],
                estimated_effort="medium",
                expected_impact="medium",
            )
        )

    worst_pages = [
        ranking
        for ranking in rankings
        if ranking.total_violations > config.page_attention_violations
    ][: config.worst_pages_limit]
    for page in worst_pages:
        severe = page.total_violations > config.page_barrier_violations
        recommendations.append(
            Recommendation(
                priority="critical" if severe else "high",
                category="page_specific",
                title=f'Fix Accessibility Issues on "{page.page_title or page.url}"',
                description=(
                    f"This page has {page.total_violations} accessibility "
                    "violations that need attention."
                ),
                actions=list(PAGE_ACTIONS),
                estimated_effort="high" if severe else "medium",
                expected_impact="medium",
                page_url=page.url,
                violation_count=page.total_violations,
            )
        )

    for test_type, metrics in test_type_metrics.items():
        info = catalogue.CATALOGUE.get(test_type)
        avg = metrics.avg_violations_per_page
        if info is None or avg <= config.test_type_recommendation_avg:
            continue
        template = info.remediation
        recommendations.append(
            Recommendation(
                priority=template.priority,
                category=template.category,
                title=template.title,
                description=template.description.format(pages=metrics.pages_completed),
                actions=list(template.actions),
                estimated_effort="high" if avg > 6 else "medium",
                expected_impact="high",
                test_type=test_type,
                avg_violations_per_page=avg,
                pages_affected=metrics.pages_completed,
            )
        )

    return sorted(recommendations, key=lambda rec: PRIORITY_ORDER[rec.priority])


def assess_risk(
    wcag: WcagCompliance, barriers: Sequence[CriticalBarrier]
) -> RiskAssessment:
    """Compliance risk from the overall score, barriers and weakest principle."""
    score = wcag.overall_score
    risk_level: RiskLevel = "low"
    risk_factors: list[str] = []

    if score < 50:
        risk_level = "critical"
        risk_factors.append("Overall compliance score below 50%")
    elif score < 70:
        risk_level = "high"
        risk_factors.append("Overall compliance score below 70%")
    elif score < 85:
        risk_level = "medium"
        risk_factors.append("Overall compliance score below WCAG AA threshold")

    critical_count = sum(1 for barrier in barriers if barrier.severity == "critical")
    if critical_count > 3:
        risk_level = "critical"
        risk_factors.append(
            f"{critical_count} critical accessibility barriers identified"
        )
    elif critical_count > 0:
        if risk_level == "low":
            risk_level = "medium"
        risk_factors.append(f"{critical_count} critical accessibility barriers found")

    scores = wcag.principle_scores
    if scores:
        lowest = min(scores, key=lambda principle: scores[principle])
        if scores[lowest] < 60:
            if risk_level == "low":
                risk_level = "medium"
            risk_factors.append(
                f"{lowest} principle score critically low "
                f"({round_half_up(scores[lowest])}%)"
            )

    return RiskAssessment(
        risk_level=risk_level,
        risk_factors=risk_factors,
        legal_risk="high" if score < 70 else "low",
        user_impact_risk="high" if critical_count > 0 else "medium",
        recommended_action=RECOMMENDED_ACTIONS[risk_level],
    )


def estimate_improvement(
    wcag: WcagCompliance, barriers: Sequence[CriticalBarrier]
) -> ImprovementPotential:
    """Score reachable by fixing the critical barriers and systematic issues."""
    current = wcag.overall_score
    critical_count = sum(1 for barrier in barriers if barrier.severity == "critical")
    systematic_count = sum(1 for barrier in barriers if barrier.type == "systematic_issue")
    improvement = (
        critical_count * CRITICAL_BARRIER_POINTS
        + systematic_count * SYSTEMATIC_ISSUE_POINTS
    )
    potential = min(100, current + improvement)

    effort: Effort
    if improvement > 30:
        effort = "high"
    elif improvement > 15:
        effort = "medium"
    else:
        effort = "low"

    if critical_count > 5 or improvement > 30:
        timeframe = "3-6 months with dedicated development effort"
    elif critical_count > 2 or improvement > 15:
        timeframe = "1-3 months with regular development cycles"
    else:
        timeframe = "2-4 weeks with focused effort"

    return ImprovementPotential(
        current_score=current,
        potential_score=potential,
        improvement_points=potential - current,
        timeframe_estimate=timeframe,
        effort_level=effort,
    )
