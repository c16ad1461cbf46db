"""Checks on the project metadata."""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def test_project_metadata():
    project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]

    assert project["name"] == "audiobatch"
    assert "readme" not in project
    assert project["scripts"]["audiobatch"] == "audiobatch.presentation.cli:main"
