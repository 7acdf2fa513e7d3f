"""Fatal error taxonomy for repository scans."""

from __future__ import annotations

from pathlib import Path


class MetricScanError(RuntimeError):
    """Base error for conditions that abort a whole scan."""


class SourceLoadError(MetricScanError):
    """Raised when the scan root cannot be enumerated."""


class SourceReadError(SourceLoadError):
    """Raised when a selected source file cannot be read as UTF-8 text."""


class SourceParseError(MetricScanError):
    """Raised when a source file does not parse into a syntax tree."""

    def __init__(self, message: str, *, path: Path | None, line: int, column: int) -> None:
        super().__init__(message)
        self.path = path
        self.line = line
        self.column = column


__all__ = ["MetricScanError", "SourceLoadError", "SourceParseError", "SourceReadError"]
