"""Integration test configuration."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root, but don't override existing env vars
_project_root = Path(__file__).parent.parent.parent
load_dotenv(_project_root / ".env", override=False)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless Northflank credentials are configured."""
    if os.environ.get("NORTHFLANK_TOKEN") and os.environ.get("NORTHFLANK_PROJECT_ID"):
        return
    skip = pytest.mark.skip(reason="NORTHFLANK_TOKEN and NORTHFLANK_PROJECT_ID not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
