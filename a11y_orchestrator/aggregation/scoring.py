"""WCAG principle scoring and letter grades."""

from collections.abc import Mapping, Sequence

from a11y_orchestrator.aggregation.rollup import round_half_up
from a11y_orchestrator.config import ScoringConfig
from a11y_orchestrator.models.report import (
    PRINCIPLES,
    Principle,
    TestTypeMetrics,
    WcagCompliance,
)

GRADE_THRESHOLDS: Sequence[tuple[int, str]] = (
    (95, "A+"),
    (90, "A"),
    (85, "A-"),
    (80, "B+"),
    (75, "B"),
    (70, "B-"),
    (65, "C+"),
    (60, "C"),
    (50, "D"),
)

COVERAGE_GRADES: Sequence[tuple[int, str]] = (
    (90, "Excellent"),
    (75, "Good"),
    (60, "Fair"),
    (40, "Poor"),
)


def compliance_grade(score: float) -> str:
    """Letter grade for a 0-100 score."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def coverage_grade(coverage: float) -> str:
    """Comprehensiveness grade for a test type coverage percentage."""
    for threshold, grade in COVERAGE_GRADES:
        if coverage >= threshold:
            return grade
    return "Inadequate"


def score_wcag(
    test_type_metrics: Mapping[str, TestTypeMetrics], config: ScoringConfig
) -> WcagCompliance:
    """Score each WCAG principle from the pass rates of the executed test types.

    Every test type contributes its pass rate to the principles it touches,
    weighted by the configured fraction. A principle score is the weighted
    mean of those contributions; principles no test type touched score 0.
    The overall score weighs all four principle scores with the fixed
    principle weights, so untested principles pull it down.
    """
    accumulated: dict[Principle, float] = dict.fromkeys(PRINCIPLES, 0.0)
    weights: dict[Principle, float] = dict.fromkeys(PRINCIPLES, 0.0)

    for test_type in sorted(test_type_metrics):
        metrics = test_type_metrics[test_type]
        mapping = config.test_type_weights.get(test_type)
        if not mapping or metrics.pages_completed == 0:
            continue

        checks = metrics.total_passed + metrics.total_violations
        success_rate = metrics.total_passed / checks if checks else 1.0
        for principle in PRINCIPLES:
            weight = mapping.get(principle, 0.0)
            if weight <= 0:
                continue
            accumulated[principle] += success_rate * 100 * weight
            weights[principle] += weight

    principle_scores: dict[Principle, float] = {}
    for principle in PRINCIPLES:
        if weights[principle] > 0:
            score = accumulated[principle] / weights[principle]
            principle_scores[principle] = round(min(100.0, max(0.0, score)), 2)
        else:
            principle_scores[principle] = 0.0

    total_weight = sum(config.principle_weights.get(p, 0.0) for p in PRINCIPLES)
    if total_weight > 0:
        weighted = sum(
            principle_scores[p] * config.principle_weights.get(p, 0.0) for p in PRINCIPLES
        )
        overall = min(100, round_half_up(weighted / total_weight))
    else:
        overall = 0

    return WcagCompliance(
        overall_score=overall,
        principle_scores=principle_scores,
        uncovered_principles=[p for p in PRINCIPLES if weights[p] == 0],
        level_aa_meets_threshold=overall >= config.level_aa_threshold,
        level_a_meets_threshold=overall >= config.level_a_threshold,
        principle_weights=dict(config.principle_weights),
    )
