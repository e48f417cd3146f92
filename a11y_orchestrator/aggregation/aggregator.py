"""Site-wide compliance report built from the page results of a batch."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from a11y_orchestrator.aggregation.barriers import identify_critical_barriers, rank_pages
from a11y_orchestrator.aggregation.guidance import (
    analyze_coverage,
    assess_risk,
    estimate_improvement,
    generate_recommendations,
)
from a11y_orchestrator.aggregation.rollup import (
    rollup_pages,
    rollup_test_types,
    sort_results,
    summarize,
)
from a11y_orchestrator.aggregation.scoring import compliance_grade, score_wcag
from a11y_orchestrator.config import ScoringConfig
from a11y_orchestrator.errors import AggregationDataMissingError
from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.models.result import PageResult
from a11y_orchestrator.store.base import ResultStore

log = logging.getLogger(__name__)

DEFAULT_BATCH_NAME = "Unnamed Batch"


@dataclass(frozen=True, kw_only=True)
class ComplianceAggregator:
    """Turns the page results of a batch into a compliance report."""

    store: ResultStore
    config: ScoringConfig = field(default_factory=ScoringConfig)

    async def aggregate(
        self, batch_id: str, batch_name: str | None = None
    ) -> ComplianceReport:
        """Build the report from every stored page result of a batch and save it.

        Raises:
            AggregationDataMissingError: The batch has no stored page results

        """
        results = await self.store.list_page_results(batch_id)
        report = self.build_report(batch_id, results, batch_name)
        await self.store.save_report(report)
        log.info(
            "Compliance report saved for batch %s: score=%d grade=%s",
            batch_id,
            report.overall_score,
            report.compliance_grade,
        )
        return report

    def build_report(
        self,
        batch_id: str,
        results: Sequence[PageResult],
        batch_name: str | None = None,
    ) -> ComplianceReport:
        """Build a report from the given page results without touching the store.

        The output depends only on the set of results, not on their order.
        """
        if not results:
            raise AggregationDataMissingError(batch_id)

        ordered = sort_results(results)
        pages = rollup_pages(ordered)
        test_type_metrics = rollup_test_types(ordered)
        wcag = score_wcag(test_type_metrics, self.config)
        barriers = identify_critical_barriers(pages, test_type_metrics, self.config)
        rankings = rank_pages(pages, self.config)

        return ComplianceReport(
            batch_id=batch_id,
            batch_name=batch_name or DEFAULT_BATCH_NAME,
            generated_at=max(result.timestamp for result in ordered),
            summary=summarize(ordered, pages, test_type_metrics),
            pages=pages,
            test_type_metrics=test_type_metrics,
            wcag_compliance=wcag,
            overall_score=wcag.overall_score,
            compliance_grade=compliance_grade(wcag.overall_score),
            critical_barriers=barriers,
            page_rankings=rankings,
            coverage_analysis=analyze_coverage(test_type_metrics),
            recommendations=generate_recommendations(
                rankings, test_type_metrics, wcag, self.config
            ),
            risk_assessment=assess_risk(wcag, barriers),
            improvement_potential=estimate_improvement(wcag, barriers),
        )
