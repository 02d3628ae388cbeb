"""Convert Rust type syntax into IDL type shapes.

Account layouts, instruction arguments and the type catalog each read field
types differently. The difference is carried by ``NormalizeMode`` so that all
three share one normalizer:

- ACCOUNT: primitives stay primitive, everything else is opaque source text.
- FIELD: like ACCOUNT, but anything whose text contains ``Vec<`` becomes a vector.
- STRUCTURAL: like FIELD, and ``Option<T>`` and tuple types are decomposed too.
"""

from enum import Enum

from tree_sitter import Node

from .parser import DEFAULT_QUERIES, Capture, QueryKind, QuerySet, SyntaxTree, walk
from .shapes import Field, Named, Option, Primitive, Tuple, TypeShape, Vector

# Field types the extractors understand; any other field is skipped
FIELD_TYPE_NODES = frozenset({
    "primitive_type",
    "type_identifier",
    "scoped_type_identifier",
    "generic_type",
    "tuple_type",
    "array_type",
})

# Named children of a type argument list that are not types
NON_TYPE_ARGUMENTS = frozenset({"lifetime", "line_comment", "block_comment"})

# Argument kinds that can name a vector element
VEC_ELEMENT_NODES = frozenset({
    "primitive_type",
    "type_identifier",
    "scoped_type_identifier",
    "generic_type",
})

# Element type used when a vector's element cannot be found
VEC_FALLBACK_ELEMENT = Primitive("u8")


class NormalizeMode(Enum):
    ACCOUNT = "account"
    FIELD = "field"
    STRUCTURAL = "structural"


def camel_case(name: str) -> str:
    """Lower-case the first character only (``Amount_due`` -> ``amount_due``)."""
    return name[:1].lower() + name[1:]


def normalize(
    tree: SyntaxTree,
    node: Node,
    mode: NormalizeMode = NormalizeMode.FIELD,
) -> TypeShape:
    """Normalize a type node into a ``TypeShape``."""
    text = tree.text(node)

    if node.type == "primitive_type":
        return Primitive(text)

    if mode is NormalizeMode.ACCOUNT:
        return Named(text)

    if mode is NormalizeMode.STRUCTURAL:
        shape = _structural_shape(tree, node)
        if shape is not None:
            return shape

    if "Vec<" in text:
        element = _vec_element(tree, node)
        if element is None:
            return Vector(VEC_FALLBACK_ELEMENT)
        return Vector(normalize(tree, element, mode))

    return Named(text)


def _type_arguments(node: Node) -> list[Node]:
    arguments = node.child_by_field_name("type_arguments")
    if arguments is None:
        return []
    return [child for child in arguments.named_children if child.type not in NON_TYPE_ARGUMENTS]


def _base_name(tree: SyntaxTree, generic: Node) -> str:
    return tree.text(generic.child_by_field_name("type"))


def _vec_element(tree: SyntaxTree, node: Node) -> Node | None:
    """First named or primitive argument of the first ``Vec`` generic at or below ``node``."""
    for candidate in walk(node):
        if candidate.type != "generic_type" or not _base_name(tree, candidate).endswith("Vec"):
            continue
        arguments = [arg for arg in _type_arguments(candidate) if arg.type in VEC_ELEMENT_NODES]
        return arguments[0] if arguments else None
    return None


def _structural_shape(tree: SyntaxTree, node: Node) -> TypeShape | None:
    if node.type == "tuple_type":
        elements = [
            normalize(tree, child, NormalizeMode.STRUCTURAL)
            for child in node.named_children
            if child.type not in NON_TYPE_ARGUMENTS
        ]
        return Tuple(tuple(elements))

    if node.type == "generic_type" and _base_name(tree, node).endswith("Option"):
        arguments = _type_arguments(node)
        if arguments:
            return Option(normalize(tree, arguments[0], NormalizeMode.STRUCTURAL))

    return None


def extract_fields(
    tree: SyntaxTree,
    body: Node | None,
    mode: NormalizeMode = NormalizeMode.FIELD,
    queries: QuerySet = DEFAULT_QUERIES,
) -> list[Field]:
    """Fields of a struct or enum variant body.

    Brace bodies keep their declared names (camel-cased). Tuple bodies get
    ``field0``, ``field1``, ... by position. Fields whose type is not one of
    ``FIELD_TYPE_NODES`` are dropped.
    """
    if body is None:
        return []

    fields = []
    if body.type == "field_declaration_list":
        for match in queries.match(body, QueryKind.FIELD):
            name = match.capture(Capture.NAME)
            type_node = match.capture(Capture.TYPE)
            if name is None or type_node is None or type_node.type not in FIELD_TYPE_NODES:
                continue
            fields.append(Field(camel_case(tree.text(name)), normalize(tree, type_node, mode)))

    elif body.type == "ordered_field_declaration_list":
        for index, type_node in enumerate(body.children_by_field_name("type")):
            if type_node.type not in FIELD_TYPE_NODES:
                continue
            fields.append(Field(f"field{index}", normalize(tree, type_node, mode)))

    return fields
