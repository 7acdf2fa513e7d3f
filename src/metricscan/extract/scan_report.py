"""Accumulated findings of a scan run."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from metricscan.serde_msgspec import StructBaseStrict

DiagnosticKind = Literal["argument_parse_error", "not_a_literal_expression"]


class MetricEntry(StructBaseStrict, frozen=True):
    """One extracted metric name and where it was found."""

    name: str
    kind: str
    path: str
    line: int
    column: int


class ArgumentDiagnostic(StructBaseStrict, frozen=True):
    """A recognized invocation whose argument yielded no literal."""

    kind: DiagnosticKind
    macro: str
    path: str
    line: int
    column: int
    tokens: str
    message: str | None = None


class ScanReportPayload(StructBaseStrict, frozen=True):
    """Serialized form of a finished scan."""

    root: str
    files_scanned: int
    metrics: tuple[MetricEntry, ...] = ()
    diagnostics: tuple[ArgumentDiagnostic, ...] = ()


@dataclass
class ScanReport:
    """Append-only findings in traversal order.

    Entries are never removed or deduplicated; a name used at several
    call-sites appears once per call-site.
    """

    entries: list[MetricEntry] = field(default_factory=list)
    diagnostics: list[ArgumentDiagnostic] = field(default_factory=list)
    files_scanned: int = 0

    def append(self, entry: MetricEntry) -> None:
        """Record an extracted metric name."""
        self.entries.append(entry)

    def record_diagnostic(self, diagnostic: ArgumentDiagnostic) -> None:
        """Record an invocation that produced no literal."""
        self.diagnostics.append(diagnostic)

    def literals(self) -> list[str]:
        """Return the extracted names in accumulation order.

        Returns
        -------
        list[str]
            Metric names, one per successful call-site.
        """
        return [entry.name for entry in self.entries]

    def to_payload(self, root: str) -> ScanReportPayload:
        """Build the serializable payload for this report.

        Returns
        -------
        ScanReportPayload
            Immutable snapshot of the report.
        """
        return ScanReportPayload(
            root=root,
            files_scanned=self.files_scanned,
            metrics=tuple(self.entries),
            diagnostics=tuple(self.diagnostics),
        )

    def __iter__(self) -> Iterator[MetricEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


__all__ = [
    "ArgumentDiagnostic",
    "DiagnosticKind",
    "MetricEntry",
    "ScanReport",
    "ScanReportPayload",
]
