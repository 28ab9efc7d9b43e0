"""Shared pytest fixtures for spec-grep tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def specs_dir(fixtures_dir: Path) -> Path:
    """Return path to the fixture spec files."""
    return fixtures_dir / "specs"


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[[str, Any], str]:
    """Return a factory writing a YAML spec file into tmp_path.

    The factory takes a relative file name and either YAML text or a
    structure to dump, and returns the path as a string.
    """

    def _write(name: str, content: Any) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(content, sort_keys=False), encoding="utf-8")
        return str(path)

    return _write
