"""HTTP scanner executor module."""

from a11y_orchestrator.executors.http_scanner.config import HttpScannerConfig
from a11y_orchestrator.executors.http_scanner.executor import HttpScannerExecutor
from a11y_orchestrator.executors.http_scanner.manifest import http_scanner_manifest

__all__ = ["HttpScannerConfig", "HttpScannerExecutor", "http_scanner_manifest"]
