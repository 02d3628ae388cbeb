"""Parse Rust program source into a syntax tree and run structural queries on it.

The grammar is tree-sitter-rust. Queries are plain values describing which
node types to collect and which grammar fields to capture; they are compiled
once into a ``QuerySet`` and shared by every extraction.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

import tree_sitter_rust as ts_rust
from tree_sitter import Language, Node, Parser, Tree

from ..logging import get_logger

logger = get_logger("parser")

RUST_LANGUAGE = Language(ts_rust.language())

# Extras that may sit between an item and the attributes preceding it
COMMENT_TYPES = frozenset({"line_comment", "block_comment"})


class IdlError(Exception):
    """Base exception for IDL extraction errors."""

    pass


class ParseError(IdlError):
    """Raised when the source cannot be handed to the grammar at all."""

    pass


@dataclass(frozen=True)
class SyntaxTree:
    """An immutable parsed source file.

    Node text is always sliced from ``source`` by byte offsets.
    """

    tree: Tree
    source: bytes

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return self.tree.root_node.has_error

    def text(self, node: Node | None) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


class RustSourceParser:
    """Turn Rust source text into a ``SyntaxTree``.

    A new tree-sitter ``Parser`` is created for every call so that parses never
    share a buffer; the ``Language`` itself is immutable and shared.
    """

    def __init__(self, language: Language = RUST_LANGUAGE):
        self.language = language

    def parse(self, source: str | bytes) -> SyntaxTree:
        """Parse a single Rust translation unit.

        Raises:
            ParseError: If the source is not valid UTF-8 or no tree was produced
        """
        if isinstance(source, bytes):
            try:
                source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"Source is not valid UTF-8: {e}") from e
            data = source
        else:
            try:
                data = source.encode("utf-8")
            except UnicodeEncodeError as e:
                raise ParseError(f"Source cannot be encoded as UTF-8: {e}") from e

        tree = Parser(self.language).parse(data)
        if tree is None:
            raise ParseError("Parser produced no syntax tree")

        syntax_tree = SyntaxTree(tree=tree, source=data)
        if syntax_tree.has_errors:
            logger.warning("Source contains syntax errors; affected items will be skipped")
        return syntax_tree


def parse(source: str | bytes) -> SyntaxTree:
    """Parse source with a default parser."""
    return RustSourceParser().parse(source)


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth-first, left to right."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def preceding_attributes(node: Node) -> list[Node]:
    """Attribute items written directly above an item, nearest first."""
    attributes = []
    sibling = node.prev_named_sibling
    while sibling is not None:
        if sibling.type == "attribute_item":
            attributes.append(sibling)
        elif sibling.type not in COMMENT_TYPES:
            break
        sibling = sibling.prev_named_sibling
    return attributes


class QueryKind(Enum):
    FUNCTION = "function"
    MODULE = "module"
    STRUCT = "struct"
    ENUM = "enum"
    STRUCT_OR_ENUM = "struct_or_enum"
    FIELD = "field"
    MACRO = "macro"
    INTEGER = "integer"


class Capture(Enum):
    """Roles a query can capture from a matched node."""

    NAME = "name"
    BODY = "body"
    TYPE = "type"
    PARAMETERS = "parameters"


@dataclass(frozen=True)
class Query:
    """A structural query: which node types match and which grammar fields to capture."""

    kind: QueryKind
    node_types: frozenset[str]
    captures: Mapping[Capture, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Match:
    """A matched node and its captured children."""

    node: Node
    captures: Mapping[Capture, Node]

    def capture(self, role: Capture) -> Node | None:
        return self.captures.get(role)


def _query(kind: QueryKind, node_types: tuple[str, ...], **captures: str) -> Query:
    return Query(
        kind=kind,
        node_types=frozenset(node_types),
        captures=MappingProxyType({Capture[role.upper()]: name for role, name in captures.items()}),
    )


@dataclass(frozen=True)
class QuerySet:
    """The fixed set of queries used during extraction."""

    queries: Mapping[QueryKind, Query]

    def __getitem__(self, kind: QueryKind) -> Query:
        return self.queries[kind]

    def match(self, node: Node, kind: QueryKind) -> list[Match]:
        """Run one query under ``node``, returning matches in source order."""
        query = self.queries[kind]
        matches = []
        for candidate in walk(node):
            if candidate.type not in query.node_types:
                continue
            captures = {}
            for role, field_name in query.captures.items():
                child = candidate.child_by_field_name(field_name)
                if child is not None:
                    captures[role] = child
            matches.append(Match(node=candidate, captures=MappingProxyType(captures)))
        return matches


def compile_queries() -> QuerySet:
    """Build the query set used by the extractors."""
    queries = [
        _query(
            QueryKind.FUNCTION,
            ("function_item",),
            name="name",
            parameters="parameters",
            body="body",
        ),
        _query(QueryKind.MODULE, ("mod_item",), name="name", body="body"),
        _query(QueryKind.STRUCT, ("struct_item",), name="name", body="body"),
        _query(QueryKind.ENUM, ("enum_item",), name="name", body="body"),
        _query(QueryKind.STRUCT_OR_ENUM, ("struct_item", "enum_item"), name="name", body="body"),
        _query(QueryKind.FIELD, ("field_declaration",), name="name", type="type"),
        _query(QueryKind.MACRO, ("macro_invocation",), name="macro"),
        _query(QueryKind.INTEGER, ("integer_literal",)),
    ]
    return QuerySet(queries=MappingProxyType({q.kind: q for q in queries}))


DEFAULT_QUERIES = compile_queries()
