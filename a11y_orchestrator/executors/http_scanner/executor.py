"""HTTP scanner executor implementation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from a11y_orchestrator.errors import ExecutorError
from a11y_orchestrator.executors.base import PollingExecutor, ProgressReporter
from a11y_orchestrator.executors.http_scanner.config import HttpScannerConfig
from a11y_orchestrator.executors.http_scanner.models import Scan, ScanCreated
from a11y_orchestrator.models.result import ExecutorResult

log = logging.getLogger(__name__)

ACCEPTED_STATUSES = frozenset([200, 201, 202])


@dataclass(frozen=True, kw_only=True)
class HttpScannerExecutor(PollingExecutor[str]):
    """Executor delegating checks to a remote scanning service.

    The service starts a scan on ``POST /scans`` and reports its state on
    ``GET /scans/{id}``. Dispatch state is the scan ID.
    """

    config: HttpScannerConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HttpScannerConfig
    ) -> AsyncGenerator["HttpScannerExecutor", None]:
        """Create executor with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"

        async with aiohttp.ClientSession(
            base_url=config.base_url,
            headers=headers,
        ) as session:
            yield cls(
                config=config,
                session=session,
                timeout=config.timeout,
                poll_interval=config.poll_interval,
            )

    async def dispatch_scan(self, url: str, test_type: str) -> str:
        """Start a remote scan and return its ID."""
        payload = {"url": url, "testType": test_type}
        log.info(
            "Starting scan: base_url=%s, url=%s, test_type=%s",
            self.config.base_url,
            url,
            test_type,
        )

        data = await self._request("POST", "/scans", json=payload)
        created = ScanCreated.model_validate(data)

        log.info("Scan %s started for %s (%s)", created.id, url, test_type)
        return created.id

    async def poll_scan(
        self,
        dispatch_state: str,
        report_progress: ProgressReporter,
    ) -> ExecutorResult | None:
        """Check if the scan finished and return its result."""
        data = await self._request("GET", f"/scans/{dispatch_state}")
        scan = Scan.model_validate(data)

        if scan.progress is not None:
            report_progress(scan.progress, f"Remote scan {scan.status}")

        if scan.status == "failed":
            raise ExecutorError(scan.error or f"Scan {scan.id} failed")

        if scan.status != "completed":
            log.debug("Scan %s still in status=%s", scan.id, scan.status)
            return None

        if scan.result is None:
            raise ExecutorError(f"Scan {scan.id} completed without a result")

        return ExecutorResult(
            violations=scan.result.violations,
            passed=scan.result.passed,
            incomplete=scan.result.incomplete,
            inapplicable=scan.result.inapplicable,
            detailed_violations=scan.result.detailed_violations,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body."""
        try:
            async with self.session.request(method, url, **kwargs) as response:
                if response.status not in ACCEPTED_STATUSES:
                    text = await response.text()
                    raise ExecutorError(
                        f"Scanner request {method} {url} failed: {response.status} {text}"
                    )
                return await response.json()
        except aiohttp.ClientError as exc:
            raise ExecutorError(f"Scanner request {method} {url} failed: {exc}") from exc
