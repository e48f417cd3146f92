"""HTTP scanner executor manifest."""

from a11y_orchestrator.executors.http_scanner.config import HttpScannerConfig
from a11y_orchestrator.executors.http_scanner.executor import HttpScannerExecutor
from a11y_orchestrator.executors.manifest import ExecutorManifest

http_scanner_manifest = ExecutorManifest(
    config_cls=HttpScannerConfig,
    executor_factory=HttpScannerExecutor.from_config,
)
