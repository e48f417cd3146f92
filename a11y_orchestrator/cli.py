"""CLI entry point for running one accessibility test batch."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from a11y_orchestrator.batch_loader import load_batch_definition
from a11y_orchestrator.config import OrchestratorConfig
from a11y_orchestrator.executors.loading import load_executor_manifest
from a11y_orchestrator.executors.registry import ExecutorRegistry
from a11y_orchestrator.models.batch import BatchStatus
from a11y_orchestrator.models.job import Job
from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.orchestrator import BatchOrchestrator
from a11y_orchestrator.store.factory import open_result_store

STATUS_SYMBOLS = {
    "completed": "✅",
    "failed": "❌",
    "running": "⏳",
    "queued": "⏸️",
}


def log_results_summary(
    log: logging.Logger,
    jobs: Sequence[Job],
    report: ComplianceReport | None,
) -> None:
    """Log a formatted summary of job outcomes and the compliance verdict."""
    log.info("=" * 80)
    log.info("Batch Results Summary:")
    log.info("=" * 80)

    for job in jobs:
        symbol = STATUS_SYMBOLS.get(job.status, "?")
        log.info(
            "%s %s %s: %s (%.2fs)",
            symbol,
            job.test_type,
            job.url,
            job.status,
            job.execution_time or 0.0,
        )
        if job.result:
            log.info(
                "  Violations: %d, passed: %d", job.result.violations, job.result.passed
            )
        if job.error:
            log.info("  Error: %s", job.error)

    if report is None:
        log.info("No compliance report produced")
        return

    log.info(
        "Compliance: score=%d grade=%s risk=%s",
        report.overall_score,
        report.compliance_grade,
        report.risk_assessment.risk_level,
    )
    for barrier in report.critical_barriers:
        log.info("  [%s] %s", barrier.severity, barrier.description)


def build_config(
    config_json: str,
    max_concurrent: int | None = None,
    job_timeout: float | None = None,
    database_url: str | None = None,
) -> OrchestratorConfig:
    """Merge command line overrides into the JSON orchestrator configuration."""
    data: dict[str, Any] = json.loads(config_json)
    overrides = {
        "max_concurrent": max_concurrent,
        "job_timeout": job_timeout,
        "database_url": database_url,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    return OrchestratorConfig.model_validate(data)


async def run(
    batch_path: Path,
    executor_key: str,
    executor_config_json: str,
    config: OrchestratorConfig,
) -> int:
    """Run one batch to completion and return exit code."""
    log = logging.getLogger("a11y_orchestrator")

    log.info("Loading batch definition: %s", batch_path)
    definition = await load_batch_definition(batch_path)

    log.info("Loading executor: %s", executor_key)
    manifest = load_executor_manifest(executor_key)
    executor_config = manifest.config_cls(**json.loads(executor_config_json))

    async with (
        open_result_store(config.database_url) as store,
        manifest.executor_factory(executor_config) as executor,
    ):
        registry = ExecutorRegistry()
        registry.register_all(definition.test_types, executor)
        orchestrator = BatchOrchestrator.create(registry, store, config)

        submission = orchestrator.submit_definition(definition)
        log.info(
            "Running %d job(s) in batch %s...",
            len(submission.job_ids),
            submission.batch_id,
        )

        status = await orchestrator.wait_for_batch(submission.batch_id)
        report = await orchestrator.get_aggregation(submission.batch_id)
        jobs = orchestrator.queue.batch_jobs(submission.batch_id)

    log_results_summary(log, jobs, report)
    print(json.dumps(format_output(submission.batch_id, status, report), indent=2))

    has_failures = status is None or status.failed > 0
    return 1 if has_failures or report is None else 0


def format_output(
    batch_id: str,
    status: BatchStatus | None,
    report: ComplianceReport | None,
) -> dict[str, Any]:
    """Format the batch outcome for JSON output."""
    return {
        "batch_id": batch_id,
        "status": status.model_dump(mode="json") if status else None,
        "report": report.model_dump(mode="json") if report else None,
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run accessibility tests for a batch of pages"
    )
    parser.add_argument(
        "--batch",
        type=Path,
        required=True,
        help="Path to the YAML batch definition",
    )
    parser.add_argument(
        "--executor",
        required=True,
        help="Executor key (e.g., http-scanner)",
    )
    parser.add_argument(
        "--executor-config",
        required=True,
        help="JSON configuration for the executor",
    )
    parser.add_argument(
        "--config",
        default="{}",
        help="JSON configuration for the orchestrator",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        help="Maximum number of concurrently running jobs",
    )
    parser.add_argument(
        "--job-timeout",
        type=float,
        help="Per-job deadline in seconds",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy async database URL for stored results",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = build_config(
        args.config,
        max_concurrent=args.max_concurrent,
        job_timeout=args.job_timeout,
        database_url=args.database_url,
    )
    exit_code = asyncio.run(
        run(
            batch_path=args.batch,
            executor_key=args.executor,
            executor_config_json=args.executor_config,
            config=config,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
