"""Shared help-panel groups for the metricscan CLI."""

from __future__ import annotations

from cyclopts import Group

session_group = Group(
    "Session",
    help="Logging and configuration file options.",
    sort_key=0,
)

source_group = Group(
    "Source Selection",
    help="Control which files under the project path are scanned.",
    sort_key=1,
)

output_group = Group(
    "Output",
    help="Configure how findings are written.",
    sort_key=2,
)

__all__ = ["output_group", "session_group", "source_group"]
