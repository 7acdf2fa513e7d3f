"""Parse Rust sources and macro argument tokens with tree-sitter."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from functools import cache
from pathlib import Path

import tree_sitter_rust
from tree_sitter import (
    LANGUAGE_VERSION,
    MIN_COMPATIBLE_LANGUAGE_VERSION,
    Language,
    Node,
    Parser,
    Tree,
)

from metricscan.extract.errors import SourceParseError

RUST_LANGUAGE = Language(tree_sitter_rust.language())

COMMENT_NODE_TYPES = frozenset({"line_comment", "block_comment"})

# Argument tokens are parsed as the initializer of a throwaway `let`.
_ARG_PREFIX = b"fn __metricscan_argument() {\n    let _ = "
_ARG_SUFFIX = b"\n    ;\n}\n"
# Leading outer attributes are recognized as attribute statements of a block.
_BLOCK_PREFIX = b"fn __metricscan_attributes() {\n"
_BLOCK_SUFFIX = b"\n}\n"

_SNIPPET_BYTES = 40

_RAW_STRING_RE = re.compile(r'r(?P<hashes>#*)"(?P<body>.*)"(?P=hashes)', re.DOTALL)
_ESCAPE_RE = re.compile(
    r"\\(?:x(?P<hex>[0-9a-fA-F]{2})"
    r"|u\{(?P<unicode>[0-9a-fA-F_]{1,8})\}"
    r"|(?P<continuation>\n[ \t\r\n]*)"
    r"|(?P<simple>.))",
    re.DOTALL,
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}


class ArgumentSyntaxError(ValueError):
    """Raised when macro argument tokens do not form a single expression."""


@dataclass(frozen=True)
class ParsedSource:
    """A source file together with its syntax tree."""

    path: Path | None
    data: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        """Return the tree root node.

        Returns
        -------
        Node
            Root ``source_file`` node.
        """
        return self.tree.root_node

    def text(self, node: Node) -> str:
        """Return the source text covered by ``node``.

        Returns
        -------
        str
            Decoded node text.
        """
        return node_text(node, self.data)


@dataclass(frozen=True)
class ParsedExpression:
    """A single expression parsed out of macro argument tokens."""

    node: Node
    data: bytes

    @property
    def kind(self) -> str:
        """Return the tree-sitter node type of the expression.

        Returns
        -------
        str
            Node type such as ``string_literal`` or ``identifier``.
        """
        return self.node.type

    @property
    def text(self) -> str:
        """Return the expression source text.

        Returns
        -------
        str
            Decoded expression text.
        """
        return node_text(self.node, self.data)


def _assert_language_abi(lang: Language) -> None:
    if not (MIN_COMPATIBLE_LANGUAGE_VERSION <= lang.abi_version <= LANGUAGE_VERSION):
        msg = f"Tree-sitter ABI mismatch: {lang.abi_version}"
        raise ValueError(msg)


@cache
def _parser() -> Parser:
    _assert_language_abi(RUST_LANGUAGE)
    return Parser(RUST_LANGUAGE)


def node_text(node: Node, data: bytes) -> str:
    """Decode the bytes spanned by a node.

    Returns
    -------
    str
        Node text, with undecodable bytes replaced.
    """
    return data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def char_column(data: bytes, byte_offset: int) -> int:
    """Return the 1-based character column of a byte offset.

    tree-sitter points count UTF-8 bytes; reported columns count characters.

    Returns
    -------
    int
        Column of ``byte_offset`` within its line.
    """
    line_start = data.rfind(b"\n", 0, byte_offset) + 1
    return len(data[line_start:byte_offset].decode("utf-8", errors="replace")) + 1


def iter_nodes(
    root: Node,
    *,
    prune: Callable[[Node], bool] | None = None,
) -> Iterator[Node]:
    """Yield nodes below ``root`` in depth-first pre-order.

    Parameters
    ----------
    root
        Node where the walk starts; it is yielded first.
    prune
        Optional predicate; children of nodes it accepts are not visited.

    Yields
    ------
    Node
        Every visited node, each exactly once.
    """
    cursor = root.walk()
    while True:
        node = cursor.node
        if node is None:
            return
        yield node
        descend = prune is None or not prune(node)
        if descend and cursor.goto_first_child():
            continue
        if cursor.goto_next_sibling():
            continue
        while True:
            if not cursor.goto_parent():
                return
            if cursor.goto_next_sibling():
                break


def first_error_node(root: Node) -> Node | None:
    """Return the first ERROR or MISSING node in pre-order, if any.

    Returns
    -------
    Node | None
        The first syntax error node, or ``None`` for a clean tree.
    """
    if not root.has_error:
        return None
    for node in iter_nodes(root, prune=lambda candidate: not candidate.has_error):
        if node.is_error or node.is_missing:
            return node
    return None


def _snippet(data: bytes, start: int, end: int) -> str:
    raw = data[start:end]
    text = raw[:_SNIPPET_BYTES].decode("utf-8", errors="replace")
    text = " ".join(text.split())
    return f"{text}..." if len(raw) > _SNIPPET_BYTES else text


def parse_source(source: str | bytes, *, path: Path | None = None) -> ParsedSource:
    """Parse a Rust source file into a syntax tree.

    Parameters
    ----------
    source
        File contents.
    path
        Path used in error messages.

    Returns
    -------
    ParsedSource
        The parsed file.

    Raises
    ------
    SourceParseError
        Raised when the file contains a syntax error or an invalid string
        escape.
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    tree = _parser().parse(data)
    error = first_error_node(tree.root_node)
    if error is not None:
        if error.is_missing:
            detail = f"expected `{error.type}`"
        else:
            detail = f"unexpected `{_snippet(data, error.start_byte, error.end_byte)}`"
        raise _source_error(error, data=data, path=path, detail=detail)
    for node in iter_nodes(tree.root_node):
        if node.type != "string_literal" or data[node.start_byte : node.start_byte + 1] != b'"':
            continue
        try:
            decode_string_literal(node_text(node, data))
        except ArgumentSyntaxError as exc:
            raise _source_error(node, data=data, path=path, detail=str(exc)) from exc
    return ParsedSource(path=path, data=data, tree=tree)


def _source_error(node: Node, *, data: bytes, path: Path | None, detail: str) -> SourceParseError:
    line = node.start_point.row + 1
    column = char_column(data, node.start_byte)
    location = f"{path}:{line}:{column}" if path is not None else f"{line}:{column}"
    msg = f"Error parsing file {location}: {detail}"
    return SourceParseError(msg, path=path, line=line, column=column)


def parse_argument_expression(tokens: str) -> ParsedExpression:
    """Parse a macro's whole argument token text as one Rust expression.

    Leading outer attributes (``#[...]``) belong to the expression and are
    skipped.

    Parameters
    ----------
    tokens
        Argument text between the invocation delimiters.

    Returns
    -------
    ParsedExpression
        The parsed expression.

    Raises
    ------
    ArgumentSyntaxError
        Raised when the tokens are empty or are not exactly one expression.
    """
    token_bytes = _blank_outer_attributes(tokens.encode("utf-8"))
    if not token_bytes.strip():
        msg = "unexpected end of input, expected an expression"
        raise ArgumentSyntaxError(msg)
    data = _ARG_PREFIX + token_bytes + _ARG_SUFFIX
    start = len(_ARG_PREFIX)
    end = start + len(token_bytes)
    root = _parser().parse(data).root_node
    error = first_error_node(root)
    if error is not None:
        raise ArgumentSyntaxError(_describe_error(error, data=data, start=start, end=end))
    value = _sole_let_value(root, data=data, start=start, end=end)
    return ParsedExpression(node=value, data=data)


def _blank_outer_attributes(token_bytes: bytes) -> bytes:
    # Blanking keeps byte offsets of the remaining tokens unchanged.
    if not token_bytes.lstrip().startswith(b"#["):
        return token_bytes
    data = _BLOCK_PREFIX + token_bytes + _BLOCK_SUFFIX
    start = len(_BLOCK_PREFIX)
    items = _named_statements(_parser().parse(data).root_node)
    body = items[0].child_by_field_name("body") if len(items) == 1 else None
    length = 0
    for child in _named_statements(body) if body is not None else []:
        if child.type != "attribute_item" or child.has_error:
            break
        length = child.end_byte - start
    if length <= 0:
        return token_bytes
    blank = bytes(byte if byte == 0x0A else 0x20 for byte in token_bytes[:length])
    return blank + token_bytes[length:]


def _describe_error(node: Node, *, data: bytes, start: int, end: int) -> str:
    if node.start_byte >= end:
        return "unexpected end of input, expected an expression"
    position = max(node.start_byte, start)
    if node.is_missing:
        return f"expected `{node.type}` at offset {position - start}"
    snippet = _snippet(data, position, min(node.end_byte, end))
    if not snippet:
        rest = data[position:end]
        position += len(rest) - len(rest.lstrip())
        snippet = data[position:end].decode("utf-8", errors="replace")[:1]
        if not snippet:
            return "unexpected end of input, expected an expression"
    return f"unexpected token `{snippet}` at offset {position - start}"


def _named_statements(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type not in COMMENT_NODE_TYPES]


def _sole_let_value(root: Node, *, data: bytes, start: int, end: int) -> Node:
    items = _named_statements(root)
    body = items[0].child_by_field_name("body") if len(items) == 1 else None
    statements = _named_statements(body) if body is not None else []
    if len(statements) != 1 or statements[0].type != "let_declaration":
        extra = next((stmt for stmt in statements[1:] if stmt.start_byte < end), None)
        if extra is None:
            msg = "expected a single expression"
            raise ArgumentSyntaxError(msg)
        snippet = _snippet(data, extra.start_byte, min(extra.end_byte, end))
        msg = f"unexpected token `{snippet}` at offset {extra.start_byte - start}"
        raise ArgumentSyntaxError(msg)
    declaration = statements[0]
    keyword = next((child for child in declaration.children if child.type == "else"), None)
    if keyword is not None:
        msg = f"unexpected token `else` at offset {keyword.start_byte - start}"
        raise ArgumentSyntaxError(msg)
    value = declaration.child_by_field_name("value")
    if value is None:
        msg = "unexpected end of input, expected an expression"
        raise ArgumentSyntaxError(msg)
    return value


def decode_string_literal(text: str) -> str:
    """Decode the source text of a Rust string literal.

    Parameters
    ----------
    text
        Literal source text, quotes included, e.g. ``"a\\tb"`` or ``r#"a"#``.

    Returns
    -------
    str
        The literal's value with quotes stripped and escapes resolved.

    Raises
    ------
    ArgumentSyntaxError
        Raised for malformed literals and invalid escapes.
    """
    text = text.replace("\r\n", "\n")
    raw = _RAW_STRING_RE.fullmatch(text)
    if raw is not None:
        return raw.group("body")
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        msg = f"not a string literal: {text!r}"
        raise ArgumentSyntaxError(msg)
    return _ESCAPE_RE.sub(_unescape, text[1:-1])


def _unescape(match: re.Match[str]) -> str:
    if match.group("continuation") is not None:
        return ""
    hex_digits = match.group("hex")
    if hex_digits is not None:
        code = int(hex_digits, 16)
        if code > 0x7F:
            msg = f"out of range hex escape `{match.group(0)}`"
            raise ArgumentSyntaxError(msg)
        return chr(code)
    unicode_digits = match.group("unicode")
    if unicode_digits is not None:
        digits = unicode_digits.replace("_", "")
        code = int(digits, 16) if digits else -1
        if not 0 <= code <= 0x10FFFF or 0xD800 <= code <= 0xDFFF:
            msg = f"invalid unicode escape `{match.group(0)}`"
            raise ArgumentSyntaxError(msg)
        return chr(code)
    simple = match.group("simple")
    try:
        return _SIMPLE_ESCAPES[simple]
    except KeyError:
        msg = f"unknown character escape `{match.group(0)}`"
        raise ArgumentSyntaxError(msg) from None


__all__ = [
    "COMMENT_NODE_TYPES",
    "RUST_LANGUAGE",
    "ArgumentSyntaxError",
    "ParsedExpression",
    "ParsedSource",
    "char_column",
    "decode_string_literal",
    "first_error_node",
    "iter_nodes",
    "node_text",
    "parse_argument_expression",
    "parse_source",
]
