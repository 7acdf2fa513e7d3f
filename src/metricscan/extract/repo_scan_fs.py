"""Filesystem-backed source file listing."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from metricscan.extract.errors import SourceLoadError, SourceReadError
from metricscan.extract.pathspec_filters import (
    SourcePathspec,
    build_source_pathspec,
    should_include_source_path,
)

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".rs",)


@dataclass(frozen=True)
class SourceScanOptions:
    """Which files under the root are handed to the parser."""

    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude_dirs: tuple[str, ...] = ()
    exclude_globs: tuple[str, ...] = ()
    respect_gitignore: bool = False
    follow_symlinks: bool = False


def normalize_extensions(extensions: Sequence[str]) -> tuple[str, ...]:
    """Ensure every extension carries a leading dot, keeping order.

    Returns
    -------
    tuple[str, ...]
        Normalized, de-duplicated extensions.
    """
    normalized: list[str] = []
    for ext in extensions:
        value = ext if ext.startswith(".") else f".{ext}"
        if value not in normalized:
            normalized.append(value)
    return tuple(normalized)


def _check_root(root: Path) -> None:
    if not root.is_dir():
        msg = f"Project path {str(root)!r} is not a readable directory."
        raise SourceLoadError(msg)
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        msg = f"Cannot enumerate project path {str(root)!r}: {exc.strerror or exc}"
        raise SourceLoadError(msg) from exc


def _log_walk_error(exc: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)


def _eligible(rel_path: Path, *, options: SourceScanOptions, filters: SourcePathspec) -> bool:
    if rel_path.suffix not in options.extensions:
        return False
    return filters.empty or should_include_source_path(rel_path, filters=filters)


def iter_source_files(root: Path, options: SourceScanOptions | None = None) -> Iterator[Path]:
    """Yield root-relative source files in a stable, sorted order.

    Parameters
    ----------
    root
        Directory to walk.
    options
        Extension and exclusion filters.

    Yields
    ------
    Path
        Root-relative paths of files to scan.

    Raises
    ------
    SourceLoadError
        Raised when ``root`` is missing or cannot be listed.
    """
    options = options or SourceScanOptions()
    _check_root(root)
    filters = build_source_pathspec(
        root,
        exclude_globs=options.exclude_globs,
        respect_gitignore=options.respect_gitignore,
    )
    for current, dirs, files in os.walk(
        root,
        onerror=_log_walk_error,
        followlinks=options.follow_symlinks,
    ):
        current_path = Path(current)
        kept = [name for name in dirs if name not in options.exclude_dirs]
        if not options.follow_symlinks:
            kept = [name for name in kept if not (current_path / name).is_symlink()]
        dirs[:] = sorted(kept)
        for filename in sorted(files):
            abs_path = current_path / filename
            if abs_path.is_symlink() and not abs_path.is_file():
                logger.debug("Skipping dangling symlink %s", abs_path)
                continue
            rel_path = abs_path.relative_to(root)
            if _eligible(rel_path, options=options, filters=filters):
                yield rel_path


def read_source_text(path: Path) -> str:
    """Read a source file as UTF-8 text.

    Returns
    -------
    str
        File contents.

    Raises
    ------
    SourceReadError
        Raised when the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Error reading file {path}: not valid UTF-8 text ({exc.reason})"
        raise SourceReadError(msg) from exc
    except OSError as exc:
        msg = f"Error reading file {path}: {exc.strerror or exc}"
        raise SourceReadError(msg) from exc


__all__ = [
    "DEFAULT_EXTENSIONS",
    "SourceScanOptions",
    "iter_source_files",
    "normalize_extensions",
    "read_source_text",
]
