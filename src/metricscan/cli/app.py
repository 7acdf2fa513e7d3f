"""Main application setup for the metricscan CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter
from cyclopts.config import Dict, Toml

from metricscan.cli.commands.scan import scan_command
from metricscan.cli.commands.version import get_version, version_command
from metricscan.cli.config_loader import ConfigError, load_config_file
from metricscan.cli.exit_codes import ExitCode
from metricscan.cli.groups import session_group
from metricscan.cli.result import CliResult
from metricscan.cli.result_action import cli_result_action

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_HELP_EPILOGUE = """
Examples:
  metricscan scan .                            Scan the current directory
  metricscan scan ./service --exclude-dirs target
  metricscan scan . --respect-gitignore --format json

Environment Variables:
  METRICSCAN_LOG_LEVEL   Default log level (DEBUG, INFO, WARNING, ERROR)
  METRICSCAN_FORMAT      Default output format (text, json)

Configuration:
  Defaults for `scan` are read from metricscan.toml ([scan] table) or from
  pyproject.toml ([tool.metricscan.scan] table), searched from the working
  directory upwards.
"""

_DEFAULT_CONFIG = (
    Toml("metricscan.toml", must_exist=False, search_parents=True),
    Toml(
        "pyproject.toml",
        root_keys=("tool", "metricscan"),
        must_exist=False,
        search_parents=True,
    ),
)

app = App(
    name="metricscan",
    help="Parses the given project and prints out the metric names it reports.",
    help_epilogue=_HELP_EPILOGUE,
    version=get_version(),
    version_flags=["--version", "-V"],
    default_parameter=Parameter(
        show_default=True,
        show_env_var=True,
    ),
    result_action=cli_result_action,
    config=list(_DEFAULT_CONFIG),
    exit_on_error=True,
    print_error=True,
    help_on_error=False,
)

app.meta.group_parameters = session_group


@dataclass(frozen=True)
class SessionOptions:
    """Session-level configuration parameters."""

    config_file: Annotated[
        str | None,
        Parameter(
            name="--config",
            help="Path to a configuration file (overrides the default search).",
            group=session_group,
        ),
    ] = None
    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Parameter(
            name="--log-level",
            help="Logging verbosity level.",
            env_var="METRICSCAN_LOG_LEVEL",
            group=session_group,
        ),
    ] = "WARNING"


_DEFAULT_SESSION_OPTIONS = SessionOptions()


@app.meta.default
def meta_launcher(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    session: Annotated[SessionOptions, Parameter(name="*")] = _DEFAULT_SESSION_OPTIONS,
) -> int:
    """Meta launcher for logging setup and config selection.

    Returns
    -------
    int
        Exit status code from command execution.

    Raises
    ------
    ValueError
        Raised when the log level is invalid.
    """
    if session.log_level not in LOG_LEVELS:
        msg = f"Unsupported log level {session.log_level!r}."
        raise ValueError(msg)
    logging.basicConfig(level=session.log_level, format=LOG_FORMAT)

    if session.config_file is not None:
        try:
            contents = load_config_file(Path(session.config_file))
        except ConfigError as exc:
            return cli_result_action(app, None, CliResult.from_exception(exc))
        app.config = [Dict(contents, source=session.config_file), *_DEFAULT_CONFIG]

    result = app(tokens)
    return result if isinstance(result, int) else ExitCode.SUCCESS


app.command(scan_command, name="scan")
app.command(version_command, name="version")


def main() -> None:
    """Run the metricscan CLI."""
    exit_code = app.meta()
    raise SystemExit(exit_code if isinstance(exit_code, int) else ExitCode.SUCCESS)


__all__ = ["app", "main"]
