"""Tests for filesystem source listing and exclusion filters."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from metricscan.extract.errors import SourceLoadError, SourceReadError
from metricscan.extract.repo_scan_fs import (
    SourceScanOptions,
    iter_source_files,
    normalize_extensions,
    read_source_text,
)

SourceWriter = Callable[[str, str], Path]


def _listed(root: Path, options: SourceScanOptions | None = None) -> list[str]:
    return [path.as_posix() for path in iter_source_files(root, options)]


def test_lists_rust_files_in_sorted_order(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure only matching files are yielded, directories before deeper files."""
    write_source("src/main.rs", "fn main() {}\n")
    write_source("src/a/lib.rs", "fn a() {}\n")
    write_source("build.rs", "fn main() {}\n")
    write_source("README.md", "# readme\n")
    write_source("Cargo.toml", "[package]\n")
    assert _listed(tmp_path) == ["build.rs", "src/main.rs", "src/a/lib.rs"]


def test_exclude_dirs_prunes_by_name(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure excluded directory names are skipped at any depth."""
    write_source("src/lib.rs", "")
    write_source("target/debug/build/out.rs", "")
    write_source("crates/x/target/gen.rs", "")
    options = SourceScanOptions(exclude_dirs=("target",))
    assert _listed(tmp_path, options) == ["src/lib.rs"]


def test_exclude_globs(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure gitwildmatch patterns skip matching files."""
    write_source("src/lib.rs", "")
    write_source("src/generated/proto.rs", "")
    write_source("benches/bench.rs", "")
    options = SourceScanOptions(exclude_globs=("generated/", "benches/*.rs"))
    assert _listed(tmp_path, options) == ["src/lib.rs"]


def test_respect_gitignore(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure root gitignore rules apply only when requested."""
    write_source(".gitignore", "/vendor\n*.gen.rs\n")
    write_source("src/lib.rs", "")
    write_source("src/out.gen.rs", "")
    write_source("vendor/dep.rs", "")
    assert _listed(tmp_path) == ["src/lib.rs", "src/out.gen.rs", "vendor/dep.rs"]
    options = SourceScanOptions(respect_gitignore=True)
    assert _listed(tmp_path, options) == ["src/lib.rs"]


def test_custom_extensions(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure the extension filter is configurable."""
    write_source("lib.rs", "")
    write_source("macros.rs.in", "")
    options = SourceScanOptions(extensions=normalize_extensions(["in"]))
    assert _listed(tmp_path, options) == ["macros.rs.in"]


def test_normalize_extensions() -> None:
    """Ensure extensions gain a leading dot and duplicates are dropped."""
    assert normalize_extensions(["rs", ".rs", ".ron"]) == (".rs", ".ron")


def test_missing_root_raises(tmp_path: Path) -> None:
    """Ensure a missing project path is a load error."""
    with pytest.raises(SourceLoadError, match="not a readable directory"):
        _listed(tmp_path / "missing")


def test_file_root_raises(write_source: SourceWriter) -> None:
    """Ensure a regular file is not accepted as the project path."""
    path = write_source("main.rs", "fn main() {}\n")
    with pytest.raises(SourceLoadError):
        _listed(path)


def test_read_source_text_rejects_invalid_utf8(tmp_path: Path) -> None:
    """Ensure undecodable files raise a read error."""
    path = tmp_path / "latin1.rs"
    path.write_bytes(b'fn f() { counter!("caf\xe9"); }\n')
    with pytest.raises(SourceReadError, match="Error reading file"):
        read_source_text(path)


def test_read_error_is_a_load_error(tmp_path: Path) -> None:
    """Ensure read failures share the load error exit path."""
    with pytest.raises(SourceLoadError):
        read_source_text(tmp_path / "gone.rs")


def test_symlinked_files_are_listed(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure file symlinks are scanned while directory symlinks are not entered."""
    write_source("shared/metrics.rs", 'fn m() { counter!("shared"); }\n')
    write_source("proj/main.rs", "fn main() {}\n")
    project = tmp_path / "proj"
    (project / "metrics.rs").symlink_to(tmp_path / "shared" / "metrics.rs")
    (project / "linked").symlink_to(tmp_path / "shared", target_is_directory=True)
    (project / "dangling.rs").symlink_to(tmp_path / "missing.rs")
    assert _listed(project) == ["main.rs", "metrics.rs"]
    assert read_source_text(project / "metrics.rs").startswith("fn m()")


def test_follow_symlinks_enters_linked_directories(
    tmp_path: Path,
    write_source: SourceWriter,
) -> None:
    """Ensure directory symlinks are walked when following is enabled."""
    write_source("shared/metrics.rs", "fn m() {}\n")
    write_source("proj/main.rs", "fn main() {}\n")
    project = tmp_path / "proj"
    (project / "linked").symlink_to(tmp_path / "shared", target_is_directory=True)
    options = SourceScanOptions(follow_symlinks=True)
    assert _listed(project, options) == ["main.rs", "linked/metrics.rs"]
