"""CLI entrypoints for metricscan."""

from metricscan.cli.app import main
from metricscan.cli.exit_codes import ExitCode
from metricscan.cli.result import CliResult

__all__ = ["CliResult", "ExitCode", "main"]
