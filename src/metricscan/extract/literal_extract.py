"""Extract literal metric names from macro argument tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from metricscan.extract.macro_classify import MetricKind
from metricscan.extract.rust_parse import (
    ArgumentSyntaxError,
    ParsedExpression,
    decode_string_literal,
    parse_argument_expression,
)

_STRING_NODE_TYPES = frozenset({"string_literal", "raw_string_literal"})
_OTHER_LITERAL_TYPES = frozenset(
    {
        "integer_literal",
        "float_literal",
        "boolean_literal",
        "char_literal",
        "byte_string_literal",
        "c_string_literal",
    }
)


class ExtractionStatus(StrEnum):
    """Outcome of extracting a literal from one recognized invocation."""

    LITERAL = "literal"
    NOT_A_LITERAL_EXPRESSION = "not_a_literal_expression"
    ARGUMENT_PARSE_ERROR = "argument_parse_error"


@dataclass(frozen=True)
class ExtractionResult:
    """Result of literal extraction for a recognized invocation.

    Parameters
    ----------
    status
        Extraction outcome.
    kind
        Metric kind of the invocation.
    value
        Decoded metric name for ``LITERAL`` results.
    message
        Parser message for ``ARGUMENT_PARSE_ERROR`` results.
    expression_kind
        Node type of the parsed expression for ``NOT_A_LITERAL_EXPRESSION``.
    """

    status: ExtractionStatus
    kind: MetricKind
    value: str | None = None
    message: str | None = None
    expression_kind: str | None = None

    @classmethod
    def literal(cls, kind: MetricKind, value: str) -> ExtractionResult:
        """Create a successful extraction.

        Returns
        -------
        ExtractionResult
            Literal result.
        """
        return cls(status=ExtractionStatus.LITERAL, kind=kind, value=value)

    @classmethod
    def not_a_literal(cls, kind: MetricKind, expression_kind: str) -> ExtractionResult:
        """Create a result for an expression that is not a string literal.

        Returns
        -------
        ExtractionResult
            Not-a-literal result.
        """
        return cls(
            status=ExtractionStatus.NOT_A_LITERAL_EXPRESSION,
            kind=kind,
            expression_kind=expression_kind,
        )

    @classmethod
    def parse_error(cls, kind: MetricKind, message: str) -> ExtractionResult:
        """Create a result for tokens that are not a single expression.

        Returns
        -------
        ExtractionResult
            Argument parse error result.
        """
        return cls(status=ExtractionStatus.ARGUMENT_PARSE_ERROR, kind=kind, message=message)

    @property
    def ok(self) -> bool:
        """Return whether a literal was extracted.

        Returns
        -------
        bool
            ``True`` for literal results.
        """
        return self.status is ExtractionStatus.LITERAL

    @property
    def other_literal(self) -> bool:
        """Return whether the expression was a literal of a non-string type.

        Returns
        -------
        bool
            ``True`` for numeric, boolean, char, byte or C string literals.
        """
        return self.expression_kind in _OTHER_LITERAL_TYPES


def extract_literal(kind: MetricKind, tokens: str) -> ExtractionResult:
    """Interpret an invocation's argument tokens as one string literal.

    Parameters
    ----------
    kind
        Metric kind of the invocation.
    tokens
        Raw argument text between the invocation delimiters.

    Returns
    -------
    ExtractionResult
        Literal value, or a classified failure.
    """
    try:
        expression = parse_argument_expression(tokens)
    except ArgumentSyntaxError as exc:
        return ExtractionResult.parse_error(kind, str(exc))
    expression_kind = _expression_kind(expression)
    if expression_kind not in _STRING_NODE_TYPES:
        return ExtractionResult.not_a_literal(kind, expression_kind)
    try:
        value = decode_string_literal(expression.text)
    except ArgumentSyntaxError as exc:
        return ExtractionResult.parse_error(kind, str(exc))
    return ExtractionResult.literal(kind, value)


def _expression_kind(expression: ParsedExpression) -> str:
    # tree-sitter-rust folds b"" and c"" into the string literal node types.
    kind = expression.kind
    if kind in _STRING_NODE_TYPES:
        prefix = expression.text[:1]
        if prefix == "b":
            return "byte_string_literal"
        if prefix == "c":
            return "c_string_literal"
    return kind


__all__ = [
    "ExtractionResult",
    "ExtractionStatus",
    "decode_string_literal",
    "extract_literal",
]
