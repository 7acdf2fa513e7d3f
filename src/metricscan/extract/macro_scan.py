"""Discover metrics macro invocations in a parsed Rust syntax tree."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from metricscan.extract.literal_extract import (
    ExtractionResult,
    ExtractionStatus,
    extract_literal,
)
from metricscan.extract.macro_classify import classify_macro
from metricscan.extract.rust_parse import ParsedSource, char_column, iter_nodes
from metricscan.extract.scan_report import (
    ArgumentDiagnostic,
    DiagnosticKind,
    MetricEntry,
    ScanReport,
)

logger = logging.getLogger(__name__)

_INLINE_PATH = "<inline>"


@dataclass(frozen=True)
class MacroInvocation:
    """A macro call-site with a single-identifier macro path."""

    name: str
    argument_tokens: str
    path: Path | None
    line: int
    column: int

    @property
    def display_path(self) -> str:
        """Return the POSIX form of the path, or a placeholder.

        Returns
        -------
        str
            Path string used in reports.
        """
        return self.path.as_posix() if self.path is not None else _INLINE_PATH


@dataclass(frozen=True)
class MacroSite:
    """A recognized invocation and the outcome of literal extraction."""

    invocation: MacroInvocation
    result: ExtractionResult


def _is_token_tree(node: Node) -> bool:
    return node.type == "token_tree"


def _invocation(node: Node, parsed: ParsedSource) -> MacroInvocation | None:
    macro = node.child_by_field_name("macro")
    if macro is None or macro.type != "identifier":
        return None
    arguments = next((child for child in node.children if child.type == "token_tree"), None)
    if arguments is None or arguments.end_byte - arguments.start_byte < 2:
        return None
    tokens = parsed.data[arguments.start_byte + 1 : arguments.end_byte - 1]
    return MacroInvocation(
        name=parsed.text(macro),
        argument_tokens=tokens.decode("utf-8", errors="replace"),
        path=parsed.path,
        line=node.start_point.row + 1,
        column=char_column(parsed.data, node.start_byte),
    )


def iter_macro_invocations(parsed: ParsedSource) -> Iterator[MacroInvocation]:
    """Yield every structural macro invocation in depth-first pre-order.

    Argument token trees are opaque, so invocations nested inside another
    macro's arguments are not yielded.

    Yields
    ------
    MacroInvocation
        Invocations in source traversal order.
    """
    for node in iter_nodes(parsed.root, prune=_is_token_tree):
        if node.type != "macro_invocation":
            continue
        invocation = _invocation(node, parsed)
        if invocation is not None:
            yield invocation


def _diagnostic(site: MacroSite) -> ArgumentDiagnostic:
    invocation = site.invocation
    result = site.result
    kind: DiagnosticKind
    if result.status is ExtractionStatus.ARGUMENT_PARSE_ERROR:
        kind = "argument_parse_error"
        message = result.message
    else:
        kind = "not_a_literal_expression"
        message = f"expression is `{result.expression_kind}`"
    return ArgumentDiagnostic(
        kind=kind,
        macro=result.kind.value,
        path=invocation.display_path,
        line=invocation.line,
        column=invocation.column,
        tokens=invocation.argument_tokens,
        message=message,
    )


def scan_tree(parsed: ParsedSource, report: ScanReport) -> tuple[MacroSite, ...]:
    """Classify and extract every invocation in one parsed file.

    Parameters
    ----------
    parsed
        Parsed source file.
    report
        Shared accumulator; extracted names are appended in traversal order.

    Returns
    -------
    tuple[MacroSite, ...]
        Recognized invocations with their extraction results.
    """
    sites: list[MacroSite] = []
    for invocation in iter_macro_invocations(parsed):
        macro_class = classify_macro(invocation.name)
        if not macro_class.recognized or macro_class.kind is None:
            continue
        result = extract_literal(macro_class.kind, invocation.argument_tokens)
        site = MacroSite(invocation=invocation, result=result)
        sites.append(site)
        logger.debug(
            "%s:%d: %s! -> %s",
            invocation.display_path,
            invocation.line,
            invocation.name,
            result.status,
        )
        if result.ok and result.value is not None:
            report.append(
                MetricEntry(
                    name=result.value,
                    kind=result.kind.value,
                    path=invocation.display_path,
                    line=invocation.line,
                    column=invocation.column,
                )
            )
        else:
            report.record_diagnostic(_diagnostic(site))
    report.files_scanned += 1
    return tuple(sites)


__all__ = ["MacroInvocation", "MacroSite", "iter_macro_invocations", "scan_tree"]
