"""In-process result store."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.models.result import PageResult
from a11y_orchestrator.store.base import ResultExistsError, ResultStore


@dataclass(frozen=True, kw_only=True)
class MemoryResultStore(ResultStore):
    """Keeps results in dictionaries for the lifetime of the process."""

    _results: dict[tuple[str, str], PageResult] = field(
        default_factory=dict, init=False, repr=False
    )
    _batch_index: dict[str, list[str]] = field(
        default_factory=dict, init=False, repr=False
    )
    _reports: dict[str, ComplianceReport] = field(
        default_factory=dict, init=False, repr=False
    )

    async def save_page_result(self, result: PageResult) -> None:
        key = (result.batch_id, result.job_id)
        if key in self._results:
            raise ResultExistsError(result.batch_id, result.job_id)
        self._results[key] = result
        self._batch_index.setdefault(result.batch_id, []).append(result.job_id)

    async def get_page_result(self, batch_id: str, job_id: str) -> PageResult | None:
        return self._results.get((batch_id, job_id))

    async def list_page_results(self, batch_id: str) -> Sequence[PageResult]:
        return [
            self._results[(batch_id, job_id)]
            for job_id in self._batch_index.get(batch_id, ())
        ]

    async def save_report(self, report: ComplianceReport) -> None:
        self._reports[report.batch_id] = report

    async def get_report(self, batch_id: str) -> ComplianceReport | None:
        return self._reports.get(batch_id)
