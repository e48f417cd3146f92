"""Configuration for the job queue and the compliance scoring."""

from collections.abc import Mapping

from pydantic import BaseModel, Field

from a11y_orchestrator import catalogue
from a11y_orchestrator.models.report import Principle

type PrincipleWeights = Mapping[Principle, float]

DEFAULT_PRINCIPLE_WEIGHTS: PrincipleWeights = {
    "perceivable": 0.3,
    "operable": 0.3,
    "understandable": 0.2,
    "robust": 0.2,
}

DEFAULT_TEST_TYPE_WEIGHTS: Mapping[str, PrincipleWeights] = {
    catalogue.AXE: {
        "perceivable": 0.4,
        "operable": 0.3,
        "understandable": 0.2,
        "robust": 0.1,
    },
    catalogue.PA11Y: {
        "perceivable": 0.3,
        "operable": 0.2,
        "understandable": 0.3,
        "robust": 0.2,
    },
    catalogue.LIGHTHOUSE: {
        "perceivable": 0.3,
        "operable": 0.2,
        "understandable": 0.2,
        "robust": 0.3,
    },
    catalogue.CONTRAST: {"perceivable": 1.0},
    catalogue.KEYBOARD: {"operable": 1.0},
    catalogue.SCREEN_READER: {
        "perceivable": 0.6,
        "operable": 0.2,
        "understandable": 0.2,
    },
    catalogue.MOBILE: {
        "perceivable": 0.2,
        "operable": 0.6,
        "understandable": 0.1,
        "robust": 0.1,
    },
    catalogue.FORM: {
        "perceivable": 0.1,
        "operable": 0.3,
        "understandable": 0.6,
    },
}


class ScoringConfig(BaseModel):
    """Weights and thresholds used by the compliance aggregator."""

    principle_weights: PrincipleWeights = Field(
        default=DEFAULT_PRINCIPLE_WEIGHTS,
        description="Weight of each WCAG principle in the overall score",
    )
    test_type_weights: Mapping[str, PrincipleWeights] = Field(
        default=DEFAULT_TEST_TYPE_WEIGHTS,
        description="Fraction of each test type attributed to each principle",
    )
    level_aa_threshold: int = Field(default=80, ge=0, le=100)
    level_a_threshold: int = Field(default=60, ge=0, le=100)
    page_barrier_violations: int = Field(
        default=10, ge=0, description="Page violations above which it is a barrier"
    )
    systematic_issue_avg: float = Field(
        default=5, ge=0, description="Average violations per page for a systematic issue"
    )
    systematic_critical_avg: float = Field(
        default=8, ge=0, description="Average above which a systematic issue is critical"
    )
    test_type_recommendation_avg: float = Field(
        default=3, ge=0, description="Average above which a test type gets a recommendation"
    )
    page_attention_score: int = Field(default=80, ge=0, le=100)
    page_attention_violations: int = Field(default=5, ge=0)
    worst_pages_limit: int = Field(default=3, ge=0)


class OrchestratorConfig(BaseModel):
    """Configuration of the batch orchestrator."""

    max_concurrent: int = Field(default=3, ge=1, description="Concurrently running jobs")
    job_timeout: float | None = Field(
        default=None, gt=0, description="Per-job deadline in seconds (None disables)"
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async URL for the result store (None keeps results in memory)",
    )
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
