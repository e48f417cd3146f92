"""Abstract base class for page result and report storage."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from a11y_orchestrator.errors import OrchestratorError
from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.models.result import PageResult


class ResultExistsError(OrchestratorError):
    """Raised when a page result is saved twice for the same job."""

    def __init__(self, batch_id: str, job_id: str) -> None:
        super().__init__(f"Page result for job '{job_id}' in batch '{batch_id}' exists")
        self.batch_id = batch_id
        self.job_id = job_id


@dataclass(frozen=True, kw_only=True)
class ResultStore(ABC):
    """Durable storage for page results, keyed by (batch id, job id).

    Page results are written once and never changed. Compliance reports are
    keyed by batch id; saving a report again replaces the previous one.
    """

    @abstractmethod
    async def save_page_result(self, result: PageResult) -> None:
        """Persist the page result of a completed job.

        Raises:
            ResultExistsError: A result for this job is already stored

        """

    @abstractmethod
    async def get_page_result(self, batch_id: str, job_id: str) -> PageResult | None:
        """Page result of a single job, if stored."""

    @abstractmethod
    async def list_page_results(self, batch_id: str) -> Sequence[PageResult]:
        """Every page result stored for a batch."""

    @abstractmethod
    async def save_report(self, report: ComplianceReport) -> None:
        """Persist the compliance report of a batch."""

    @abstractmethod
    async def get_report(self, batch_id: str) -> ComplianceReport | None:
        """Latest compliance report of a batch, if any."""
