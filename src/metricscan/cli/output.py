"""Render scan progress and findings to stdout/stderr."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, TextIO

from metricscan.extract.literal_extract import ExtractionStatus
from metricscan.serde_msgspec import dumps_json

if TYPE_CHECKING:
    from metricscan.extract.macro_scan import MacroSite
    from metricscan.extract.scan_report import ScanReport
    from metricscan.extract.scan_run import FileScan

OutputFormat = Literal["text", "json"]

FINDINGS_HEADER = "Found macros of interest:"

_LINE_BREAK_RE = re.compile(r"\s*\n\s*")


def display_tokens(tokens: str) -> str:
    """Collapse an argument token text onto a single line.

    Returns
    -------
    str
        Stripped tokens with line breaks folded into single spaces.
    """
    return _LINE_BREAK_RE.sub(" ", tokens.strip())


@dataclass
class ScanOutputWriter:
    """Write per-invocation progress and the final findings summary.

    Streams default to the interpreter's current ``sys.stdout`` and
    ``sys.stderr`` at write time.
    """

    output_format: OutputFormat = "text"
    stdout: TextIO | None = None
    stderr: TextIO | None = None

    def _out(self, line: str) -> None:
        (self.stdout or sys.stdout).write(line + "\n")

    def _err(self, line: str) -> None:
        (self.stderr or sys.stderr).write(line + "\n")

    def write_file_scan(self, file_scan: FileScan) -> None:
        """Write the lines for every recognized invocation of one file."""
        for site in file_scan.sites:
            self.write_site(site)

    def write_site(self, site: MacroSite) -> None:
        """Write progress and diagnostics for one recognized invocation."""
        result = site.result
        kind = result.kind.value
        tokens = display_tokens(site.invocation.argument_tokens)
        text = self.output_format == "text"
        if text:
            self._out(f"metric macro ident {kind} Tokens: {tokens}")
        if result.status is ExtractionStatus.ARGUMENT_PARSE_ERROR:
            self._err(f"Error while parsing tokens: {result.message}. Tokens: {tokens}")
        elif result.status is ExtractionStatus.NOT_A_LITERAL_EXPRESSION and text:
            if result.other_literal:
                self._out(f"Not a string literal: {kind}")
            else:
                self._out(f"Not a literal expression {kind}")

    def write_summary(self, report: ScanReport, *, root: str) -> None:
        """Write the findings accumulated over the whole run."""
        if self.output_format == "json":
            payload = dumps_json(report.to_payload(root), pretty=True)
            self._out(payload.decode("utf-8"))
            return
        self._out(FINDINGS_HEADER)
        for name in report.literals():
            self._out(name)


__all__ = ["FINDINGS_HEADER", "OutputFormat", "ScanOutputWriter", "display_tokens"]
