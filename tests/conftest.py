"""Shared fixtures for metricscan tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

SourceWriter: TypeAlias = Callable[[str, str], Path]


@pytest.fixture
def write_source(tmp_path: Path) -> SourceWriter:
    """Return a helper that writes a file below ``tmp_path``.

    Returns
    -------
    SourceWriter
        Callable taking a relative path and file contents.
    """

    def _write(rel_path: str, content: str) -> Path:
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
