"""Exceptions raised by the orchestration core."""


class OrchestratorError(Exception):
    """Base class for orchestration errors."""


class ExecutorError(OrchestratorError):
    """Raised when a test executor fails to produce a result.

    Always local to one job: the job is marked failed with this message.
    """


class SubmissionError(OrchestratorError):
    """Raised when a submission is malformed; no job is created."""


class AggregationDataMissingError(OrchestratorError):
    """Raised when a batch has no page results to aggregate."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"No page results found for batch '{batch_id}'")
        self.batch_id = batch_id
