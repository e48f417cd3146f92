"""Models for the site-wide compliance report built from a batch."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Literal

from pydantic import Field

from a11y_orchestrator.models.base import Model

type Principle = Literal["perceivable", "operable", "understandable", "robust"]

type Severity = Literal["critical", "major", "minor"]

type Priority = Literal["critical", "high", "medium", "low"]

type Importance = Literal["critical", "high", "medium"]

type RiskLevel = Literal["low", "medium", "high", "critical"]

type Effort = Literal["low", "medium", "high"]

PRINCIPLES: Sequence[Principle] = ("perceivable", "operable", "understandable", "robust")


class PageRollup(Model):
    """Totals of every test run against one URL."""

    url: str
    page_title: str | None = None
    page_depth: int = 0
    test_types: Sequence[str] = Field(default_factory=list)
    total_violations: int = 0
    total_passed: int = 0
    total_incomplete: int = 0


class TestTypeMetrics(Model):
    """Totals of one test type across all pages."""

    __test__ = False

    test_type: str
    total_violations: int = 0
    total_passed: int = 0
    total_incomplete: int = 0
    pages_completed: int = 0
    avg_violations_per_page: float = 0.0


class ReportSummary(Model):
    """Headline numbers of a batch."""

    total_pages: int
    total_tests: int
    total_violations: int
    total_passed: int
    compliance_score: int = Field(..., description="Raw pass rate over all checks")
    unique_test_types: int


class WcagCompliance(Model):
    """Per-principle and overall WCAG scores."""

    overall_score: int
    principle_scores: Mapping[Principle, float]
    uncovered_principles: Sequence[Principle] = Field(default_factory=list)
    level_aa_meets_threshold: bool
    level_a_meets_threshold: bool
    principle_weights: Mapping[Principle, float]


class CriticalBarrier(Model):
    """Page or systematic test-type issue above a severity threshold."""

    type: Literal["high_violation_count", "systematic_issue"]
    severity: Severity
    description: str
    impact: str
    page: str | None = None
    page_title: str | None = None
    count: int | None = None
    test_type: str | None = None
    test_name: str | None = None
    average_violations: float | None = None
    pages_affected: int | None = None


class PageRanking(Model):
    """Compliance score and grade of one page."""

    url: str
    page_title: str | None = None
    compliance_score: int
    grade: str
    total_violations: int
    total_passed: int
    tests_performed: int
    needs_attention: bool


class MissingTest(Model):
    """Catalogued test type that did not run in the batch."""

    test_type: str
    name: str
    importance: Importance


class CoverageAnalysis(Model):
    """How much of the test type catalogue a batch exercised."""

    coverage_percentage: int
    executed_test_types: int
    total_available_test_types: int
    missing_tests: Sequence[MissingTest]
    comprehensiveness_grade: str
    recommendation: str


class Recommendation(Model):
    """Prioritized remediation guidance."""

    priority: Priority
    category: str
    title: str
    description: str
    actions: Sequence[str]
    estimated_effort: Effort
    expected_impact: Effort
    page_url: str | None = None
    violation_count: int | None = None
    test_type: str | None = None
    avg_violations_per_page: float | None = None
    pages_affected: int | None = None


class RiskAssessment(Model):
    """Compliance risk derived from the overall score and barriers."""

    risk_level: RiskLevel
    risk_factors: Sequence[str]
    legal_risk: Literal["low", "high"]
    user_impact_risk: Literal["medium", "high"]
    recommended_action: str


class ImprovementPotential(Model):
    """Score reachable by addressing the critical barriers."""

    current_score: int
    potential_score: int
    improvement_points: int
    timeframe_estimate: str
    effort_level: Effort


class ComplianceReport(Model):
    """Site-wide compliance assessment of a batch.

    Derived entirely from the batch's page results; regenerating it from the
    same results yields an identical report.
    """

    batch_id: str
    batch_name: str
    generated_at: datetime = Field(..., description="Latest page result timestamp")
    summary: ReportSummary
    pages: Sequence[PageRollup]
    test_type_metrics: Mapping[str, TestTypeMetrics]
    wcag_compliance: WcagCompliance
    overall_score: int
    compliance_grade: str
    critical_barriers: Sequence[CriticalBarrier]
    page_rankings: Sequence[PageRanking]
    coverage_analysis: CoverageAnalysis
    recommendations: Sequence[Recommendation]
    risk_assessment: RiskAssessment
    improvement_potential: ImprovementPotential
