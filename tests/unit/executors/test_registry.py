"""Tests for executor registry."""

import logging

import pytest

from a11y_orchestrator.errors import SubmissionError
from a11y_orchestrator.executors.registry import ExecutorRegistry
from a11y_orchestrator.testing.executors import ScriptedExecutor


def test_register_and_get() -> None:
    """Returns the executor registered for a test type."""
    registry = ExecutorRegistry()
    executor = ScriptedExecutor()

    registry.register("a11y:axe", executor)

    assert registry.get("a11y:axe") is executor
    assert "a11y:axe" in registry
    assert "test:form" not in registry


def test_register_all() -> None:
    """Registers one executor for several test types."""
    registry = ExecutorRegistry()
    executor = ScriptedExecutor()

    registry.register_all(["a11y:axe", "test:form"], executor)

    assert registry.test_types == ["a11y:axe", "test:form"]
    assert registry.get("test:form") is executor


def test_get_unknown_test_type_raises() -> None:
    """Raises SubmissionError listing registered test types."""
    registry = ExecutorRegistry()
    registry.register("a11y:axe", ScriptedExecutor())

    with pytest.raises(SubmissionError) as exc_info:
        registry.get("test:unknown")

    assert "test:unknown" in str(exc_info.value)
    assert "a11y:axe" in str(exc_info.value)


def test_register_replacement_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    """Replacing an executor is allowed but logged."""
    registry = ExecutorRegistry()
    replacement = ScriptedExecutor()
    registry.register("a11y:axe", ScriptedExecutor())

    with caplog.at_level(logging.WARNING):
        registry.register("a11y:axe", replacement)

    assert registry.get("a11y:axe") is replacement
    assert "Replacing executor for test type a11y:axe" in caplog.text
