"""Drive a metrics macro scan over a source tree."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from metricscan.extract.macro_scan import MacroSite, scan_tree
from metricscan.extract.repo_scan_fs import SourceScanOptions, iter_source_files, read_source_text
from metricscan.extract.rust_parse import parse_source
from metricscan.extract.scan_report import ScanReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileScan:
    """Recognized invocations found in one file."""

    path: Path
    sites: tuple[MacroSite, ...]


def scan_file(root: Path, rel_path: Path, report: ScanReport) -> FileScan:
    """Read, parse and scan one root-relative file.

    Returns
    -------
    FileScan
        Recognized invocations in traversal order.
    """
    text = read_source_text(root / rel_path)
    parsed = parse_source(text, path=rel_path)
    sites = scan_tree(parsed, report)
    logger.debug("Scanned %s: %d metric invocation(s)", rel_path.as_posix(), len(sites))
    return FileScan(path=rel_path, sites=sites)


def iter_file_scans(
    root: Path,
    report: ScanReport,
    options: SourceScanOptions | None = None,
) -> Iterator[FileScan]:
    """Scan files one at a time, accumulating into ``report``.

    Parameters
    ----------
    root
        Project directory.
    report
        Accumulator shared by every file of the run.
    options
        Source selection options.

    Yields
    ------
    FileScan
        One result per file, in source listing order.

    Raises
    ------
    SourceLoadError
        Raised when the root or a file cannot be read.
    SourceParseError
        Raised when a file fails to parse; no later file is scanned.
    """
    for rel_path in iter_source_files(root, options):
        yield scan_file(root, rel_path, report)


def scan_repository(
    root: Path,
    options: SourceScanOptions | None = None,
    *,
    on_file: Callable[[FileScan], None] | None = None,
) -> ScanReport:
    """Scan every selected file under ``root``.

    Parameters
    ----------
    root
        Project directory.
    options
        Source selection options.
    on_file
        Called with each file's result as soon as it is scanned.

    Returns
    -------
    ScanReport
        Extracted names in accumulation order.
    """
    report = ScanReport()
    t0 = time.perf_counter()
    for file_scan in iter_file_scans(root, report, options):
        if on_file is not None:
            on_file(file_scan)
    logger.info(
        "Scanned %d file(s) in %.1fms: %d metric name(s), %d diagnostic(s)",
        report.files_scanned,
        (time.perf_counter() - t0) * 1000.0,
        len(report),
        len(report.diagnostics),
    )
    return report


def scan_source(source: str, *, path: Path | None = None) -> ScanReport:
    """Scan a single in-memory source text.

    Returns
    -------
    ScanReport
        Extracted names in traversal order.
    """
    report = ScanReport()
    scan_tree(parse_source(source, path=path), report)
    return report


__all__ = ["FileScan", "iter_file_scans", "scan_file", "scan_repository", "scan_source"]
