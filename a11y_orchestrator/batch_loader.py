"""Loading of YAML batch definition files."""

import asyncio
from pathlib import Path

import yaml

from a11y_orchestrator.models.submission import BatchDefinition


async def load_batch_definition(path: Path) -> BatchDefinition:
    """Load and validate a batch definition.

    Example file::

        name: Marketing site
        test_types: [a11y:axe, test:keyboard]
        pages:
          - url: https://example.com/
            title: Home
          - url: https://example.com/contact
            depth: 1

    Raises:
        FileNotFoundError: If the file does not exist
        yaml.YAMLError: If the file is not valid YAML
        pydantic.ValidationError: If the content does not match the schema

    """
    content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    data = yaml.safe_load(content)
    return BatchDefinition.model_validate(data or {})
