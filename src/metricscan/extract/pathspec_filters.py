"""Pathspec-backed exclude filters for source scans."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from pathspec import GitIgnoreSpec, PathSpec


@dataclass(frozen=True)
class SourcePathspec:
    """Compiled pathspec filters for source scanning."""

    exclude_spec: PathSpec | None
    ignore_spec: GitIgnoreSpec | None

    @property
    def empty(self) -> bool:
        """Return whether no filter is configured.

        Returns
        -------
        bool
            ``True`` when every path passes.
        """
        return self.exclude_spec is None and self.ignore_spec is None


def build_source_pathspec(
    root: Path,
    *,
    exclude_globs: Sequence[str],
    respect_gitignore: bool,
) -> SourcePathspec:
    """Compile exclusion filters for a scan root.

    Parameters
    ----------
    root
        Scan root; ``.gitignore`` files are read relative to it.
    exclude_globs
        Gitwildmatch patterns for files to skip.
    respect_gitignore
        Whether to honor the root ``.gitignore`` and ``.git/info/exclude``.

    Returns
    -------
    SourcePathspec
        Compiled filters.
    """
    from_lines = cast("Callable[[str, Iterable[str]], PathSpec]", PathSpec.from_lines)
    exclude_spec = from_lines("gitwildmatch", list(exclude_globs)) if exclude_globs else None
    ignore_spec = _gitignore_spec(root) if respect_gitignore else None
    return SourcePathspec(exclude_spec=exclude_spec, ignore_spec=ignore_spec)


def should_include_source_path(rel_path: Path, *, filters: SourcePathspec) -> bool:
    """Return True when a root-relative path passes the filters.

    Returns
    -------
    bool
        ``True`` when the path should be scanned.
    """
    rel_posix = rel_path.as_posix()
    if filters.exclude_spec is not None and filters.exclude_spec.match_file(rel_posix):
        return False
    return not (filters.ignore_spec is not None and filters.ignore_spec.match_file(rel_posix))


def _gitignore_spec(root: Path) -> GitIgnoreSpec | None:
    lines = _gitignore_lines(root)
    if not lines:
        return None
    ignore_from_lines = cast("Callable[[Iterable[str]], GitIgnoreSpec]", GitIgnoreSpec.from_lines)
    return ignore_from_lines(lines)


def _gitignore_lines(root: Path) -> list[str]:
    lines: list[str] = []
    root_ignore = root / ".gitignore"
    if root_ignore.is_file():
        lines.extend(_read_lines(root_ignore))
    info_exclude = root / ".git" / "info" / "exclude"
    if info_exclude.is_file():
        lines.extend(_read_lines(info_exclude))
    return lines


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []


__all__ = ["SourcePathspec", "build_source_pathspec", "should_include_source_path"]
