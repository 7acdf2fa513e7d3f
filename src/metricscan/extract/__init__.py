"""Source discovery, parsing and metrics macro extraction."""

from metricscan.extract.errors import (
    MetricScanError,
    SourceLoadError,
    SourceParseError,
    SourceReadError,
)
from metricscan.extract.macro_classify import MetricKind, classify_macro
from metricscan.extract.repo_scan_fs import SourceScanOptions
from metricscan.extract.scan_report import ScanReport
from metricscan.extract.scan_run import iter_file_scans, scan_repository, scan_source

__all__ = [
    "MetricKind",
    "MetricScanError",
    "ScanReport",
    "SourceLoadError",
    "SourceParseError",
    "SourceReadError",
    "SourceScanOptions",
    "classify_macro",
    "iter_file_scans",
    "scan_repository",
    "scan_source",
]
