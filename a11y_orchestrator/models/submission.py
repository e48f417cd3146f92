"""Models for batch submissions and batch definition files."""

from collections.abc import Sequence

from pydantic import Field

from a11y_orchestrator.models.base import Model


class PageSpec(Model):
    """Page to be tested."""

    url: str = Field(..., description="Page URL")
    title: str | None = Field(default=None, description="Human-readable page title")
    depth: int = Field(default=0, ge=0, description="Crawl depth of the page")


class JobSpec(Model):
    """Single (page, test type) combination of a batch."""

    url: str = Field(..., description="Page URL")
    test_type: str = Field(..., description="Test type key")
    title: str | None = Field(default=None, description="Page title")
    depth: int = Field(default=0, description="Crawl depth of the page")


class BatchDefinition(Model):
    """Pages and test types submitted together as one batch."""

    name: str | None = Field(default=None, description="Batch display name")
    test_types: Sequence[str] = Field(
        default_factory=list, description="Test types to run on every page"
    )
    pages: Sequence[PageSpec] = Field(default_factory=list, description="Pages")

    def to_job_specs(self) -> Sequence[JobSpec]:
        """Expand into one job spec per (page, test type) combination.

        Repeated URLs and repeated test types are collapsed so each
        combination appears once; the first occurrence wins.
        """
        pages: dict[str, PageSpec] = {}
        for page in self.pages:
            pages.setdefault(page.url, page)
        test_types = list(dict.fromkeys(self.test_types))

        return [
            JobSpec(
                url=page.url,
                test_type=test_type,
                title=page.title,
                depth=page.depth,
            )
            for page in pages.values()
            for test_type in test_types
        ]


class SubmissionResult(Model):
    """Identifiers created for a submitted batch."""

    batch_id: str
    job_ids: Sequence[str]
