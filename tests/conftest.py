"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from kbindex.config import Settings
from tests._fixtures.site import index_json, write_site


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def alpha_beta_files() -> dict[str, str]:
    """Alpha has `intro`; Beta depends on Alpha and has its own `guide`."""
    return {
        "experiment/Alpha/index.json": index_json("Alpha"),
        "experiment/Alpha/KB/latest/intro.md": "---\ntitle: Introduction\n---\nAlpha intro\n",
        "experiment/Beta/index.json": index_json("Beta", dependency=["Alpha"]),
        "experiment/Beta/KB/latest/guide.md": "Beta guide\n",
    }


@pytest.fixture
def alpha_beta_site(tmp_path: Path, alpha_beta_files: dict[str, str]) -> Path:
    return write_site(tmp_path / "site", alpha_beta_files)
