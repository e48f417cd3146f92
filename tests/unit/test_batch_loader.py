"""Tests for batch definition loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from a11y_orchestrator.batch_loader import load_batch_definition


async def test_loads_valid_definition(tmp_path: Path) -> None:
    """Loads name, test types and pages from YAML."""
    path = tmp_path / "batch.yaml"
    path.write_text(
        """\
name: Marketing site
test_types:
  - a11y:axe
  - test:keyboard
pages:
  - url: https://example.com/
    title: Home
  - url: https://example.com/contact
    depth: 1
"""
    )

    definition = await load_batch_definition(path)

    assert definition.name == "Marketing site"
    assert list(definition.test_types) == ["a11y:axe", "test:keyboard"]
    assert [page.url for page in definition.pages] == [
        "https://example.com/",
        "https://example.com/contact",
    ]
    assert definition.pages[0].title == "Home"
    assert definition.pages[1].depth == 1


async def test_empty_file_gives_empty_definition(tmp_path: Path) -> None:
    """An empty file has no pages and no test types."""
    path = tmp_path / "batch.yaml"
    path.write_text("")

    definition = await load_batch_definition(path)

    assert definition.name is None
    assert definition.pages == []
    assert definition.test_types == []


async def test_raises_on_missing_file(tmp_path: Path) -> None:
    """Raises FileNotFoundError when the file does not exist."""
    with pytest.raises(FileNotFoundError):
        await load_batch_definition(tmp_path / "missing.yaml")


async def test_raises_on_invalid_yaml(tmp_path: Path) -> None:
    """Raises YAMLError on malformed content."""
    path = tmp_path / "batch.yaml"
    path.write_text("pages: [unclosed")

    with pytest.raises(yaml.YAMLError):
        await load_batch_definition(path)


async def test_raises_on_invalid_schema(tmp_path: Path) -> None:
    """Raises ValidationError when a page has no URL."""
    path = tmp_path / "batch.yaml"
    path.write_text("test_types: [a11y:axe]\npages:\n  - title: Home\n")

    with pytest.raises(ValidationError):
        await load_batch_definition(path)


async def test_raises_on_unknown_keys(tmp_path: Path) -> None:
    """Misspelled keys are rejected instead of ignored."""
    path = tmp_path / "batch.yaml"
    path.write_text("test_type: [a11y:axe]\npages:\n  - url: https://example.com/\n")

    with pytest.raises(ValidationError):
        await load_batch_definition(path)
