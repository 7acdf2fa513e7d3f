"""Scan command implementation for the metricscan CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from metricscan.cli.exit_codes import ExitCode
from metricscan.cli.groups import output_group, source_group
from metricscan.cli.output import OutputFormat, ScanOutputWriter
from metricscan.cli.result import CliResult
from metricscan.extract.errors import MetricScanError
from metricscan.extract.repo_scan_fs import (
    DEFAULT_EXTENSIONS,
    SourceScanOptions,
    normalize_extensions,
)
from metricscan.extract.scan_run import scan_repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanCommandOptions:
    """CLI options for source selection and output."""

    extensions: Annotated[
        tuple[str, ...],
        Parameter(
            name="--extensions",
            help="Source file extensions to scan.",
            group=source_group,
        ),
    ] = DEFAULT_EXTENSIONS
    exclude_dirs: Annotated[
        tuple[str, ...],
        Parameter(
            name="--exclude-dirs",
            help="Directory names to prune from the walk (e.g. target).",
            group=source_group,
        ),
    ] = ()
    exclude_globs: Annotated[
        tuple[str, ...],
        Parameter(
            name="--exclude-globs",
            help="Gitwildmatch patterns, relative to the project path, of files to skip.",
            group=source_group,
        ),
    ] = ()
    respect_gitignore: Annotated[
        bool,
        Parameter(
            name="--respect-gitignore",
            help="Skip files ignored by the project's .gitignore.",
            group=source_group,
        ),
    ] = False
    follow_symlinks: Annotated[
        bool,
        Parameter(
            name="--follow-symlinks",
            help="Descend into symlinked directories.",
            group=source_group,
        ),
    ] = False
    output_format: Annotated[
        OutputFormat,
        Parameter(
            name="--format",
            help="Output format: progress lines and a name list, or one JSON document.",
            env_var="METRICSCAN_FORMAT",
            group=output_group,
        ),
    ] = "text"

    def source_options(self) -> SourceScanOptions:
        """Translate CLI options to source listing options.

        Returns
        -------
        SourceScanOptions
            Options for the source loader.
        """
        return SourceScanOptions(
            extensions=normalize_extensions(self.extensions),
            exclude_dirs=tuple(self.exclude_dirs),
            exclude_globs=tuple(self.exclude_globs),
            respect_gitignore=self.respect_gitignore,
            follow_symlinks=self.follow_symlinks,
        )


_DEFAULT_SCAN_OPTIONS = ScanCommandOptions()


def scan_command(
    project_path: Annotated[
        Path,
        Parameter(help="Path to the project directory."),
    ],
    *,
    options: Annotated[ScanCommandOptions, Parameter(name="*")] = _DEFAULT_SCAN_OPTIONS,
) -> CliResult | int:
    """Print the metric names passed to gauge!/counter!/histogram! macros.

    Returns
    -------
    CliResult | int
        Exit status, or an error result when the scan aborted.
    """
    writer = ScanOutputWriter(output_format=options.output_format)
    try:
        report = scan_repository(
            project_path,
            options.source_options(),
            on_file=writer.write_file_scan,
        )
    except MetricScanError as exc:
        logger.debug("Scan of %s aborted", project_path, exc_info=True)
        return CliResult.from_exception(exc)
    writer.write_summary(report, root=project_path.as_posix())
    return ExitCode.SUCCESS


__all__ = ["ScanCommandOptions", "scan_command"]
