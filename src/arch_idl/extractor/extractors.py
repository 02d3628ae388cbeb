"""Extract the IDL catalogs from a parsed program.

Each extractor is a pure function of the syntax tree and the query set. None
of them raise: a pattern that is not found simply yields an empty catalog.

The heuristics are textual on purpose:
- Instructions come from Borsh-derived structs, and only when a function named
  ``entrypoint`` exists.
- Every instruction receives the same single ``account`` entry, whose flags
  reflect any ``is_writable``/``is_signer`` assertion in ``entrypoint``.
- Error codes are integer literals above a threshold.
"""

import re

from tree_sitter import Node

from ..logging import get_logger
from .normalizer import NormalizeMode, camel_case, extract_fields
from .parser import (
    DEFAULT_QUERIES,
    Capture,
    Match,
    QueryKind,
    QuerySet,
    SyntaxTree,
    preceding_attributes,
)
from .shapes import (
    AccountRef,
    AccountTypeDescriptor,
    EnumShape,
    EnumVariant,
    ErrorDescriptor,
    InstructionDescriptor,
    StructShape,
    TypeCatalogEntry,
)

logger = get_logger("extractor")

PROGRAM_ENTRYPOINT = "process_instruction"
INSTRUCTION_ENTRYPOINT = "entrypoint"
FALLBACK_PROGRAM_NAME = "solana_program"

BORSH_DERIVE_MARKERS = ("BorshSerialize", "BorshDeserialize")
PARAMS_SUFFIX = "Params"

ASSERT_MARKER = "assert!"
WRITABLE_MARKER = "is_writable"
SIGNER_MARKER = "is_signer"
ENTRYPOINT_ACCOUNT_NAME = "account"

DEFAULT_ERROR_CODE_THRESHOLD = 500

# Rust integer literal type suffixes (1_000u64, 0xffi32, ...)
INTEGER_SUFFIX_RE = re.compile(r"[ui](?:8|16|32|64|128|size)$")
INTEGER_RADIX = {"0x": 16, "0o": 8, "0b": 2}


def find_function(tree: SyntaxTree, name: str, queries: QuerySet = DEFAULT_QUERIES) -> Match | None:
    """First function item with exactly the given name, in source order."""
    for match in queries.match(tree.root, QueryKind.FUNCTION):
        if tree.text(match.capture(Capture.NAME)) == name:
            return match
    return None


def has_borsh_derive(tree: SyntaxTree, item: Node) -> bool:
    """Whether one derive attribute above ``item`` names both Borsh traits."""
    for attribute in preceding_attributes(item):
        text = tree.text(attribute)
        if "derive" in text and all(marker in text for marker in BORSH_DERIVE_MARKERS):
            return True
    return False


# =============================================================================
# Program name
# =============================================================================


def _enclosing_module(node: Node) -> Node | None:
    parent = node.parent
    while parent is not None:
        if parent.type == "mod_item":
            return parent
        parent = parent.parent
    return None


def resolve_program_name(tree: SyntaxTree, queries: QuerySet = DEFAULT_QUERIES) -> str:
    """
    Derive the program name.

    A program with a ``process_instruction`` function is named after its module:
    the module enclosing that function, or else the first module in the file.
    Everything else is named ``solana_program``.
    """
    entry = find_function(tree, PROGRAM_ENTRYPOINT, queries)
    if entry is None:
        return FALLBACK_PROGRAM_NAME

    module = _enclosing_module(entry.node)
    if module is None:
        modules = queries.match(tree.root, QueryKind.MODULE)
        module = modules[0].node if modules else None
    if module is None:
        return FALLBACK_PROGRAM_NAME

    module_name = tree.text(module.child_by_field_name("name"))
    if not module_name:
        return FALLBACK_PROGRAM_NAME
    return f"{module_name}_program"


# =============================================================================
# Instructions
# =============================================================================


def instruction_name(struct_name: str) -> str:
    """``TransferParams`` -> ``transfer``."""
    if struct_name.endswith(PARAMS_SUFFIX):
        struct_name = struct_name[: -len(PARAMS_SUFFIX)]
    return camel_case(struct_name)


def entrypoint_account(tree: SyntaxTree, entry: Match, queries: QuerySet = DEFAULT_QUERIES) -> AccountRef:
    """The single account shared by every instruction.

    Flags are set when any assertion in the entrypoint body checks
    ``is_writable`` or ``is_signer``.
    """
    scope = entry.capture(Capture.BODY)
    if scope is None:
        scope = entry.node

    assertions = [
        text
        for text in (tree.text(m.node) for m in queries.match(scope, QueryKind.MACRO))
        if ASSERT_MARKER in text
    ]
    account_checks = [a for a in assertions if WRITABLE_MARKER in a or SIGNER_MARKER in a]

    return AccountRef(
        name=ENTRYPOINT_ACCOUNT_NAME,
        is_mut=any(WRITABLE_MARKER in check for check in account_checks),
        is_signer=any(SIGNER_MARKER in check for check in account_checks),
    )


def extract_instructions(
    tree: SyntaxTree,
    queries: QuerySet = DEFAULT_QUERIES,
    mode: NormalizeMode = NormalizeMode.FIELD,
) -> list[InstructionDescriptor]:
    """One instruction per Borsh-derived struct, if the program has an ``entrypoint``."""
    entry = find_function(tree, INSTRUCTION_ENTRYPOINT, queries)
    if entry is None:
        logger.debug("No %s function; no instructions extracted", INSTRUCTION_ENTRYPOINT)
        return []

    account = entrypoint_account(tree, entry, queries)

    instructions = []
    for match in queries.match(tree.root, QueryKind.STRUCT):
        name_node = match.capture(Capture.NAME)
        if name_node is None or not has_borsh_derive(tree, match.node):
            continue
        instructions.append(
            InstructionDescriptor(
                name=instruction_name(tree.text(name_node)),
                accounts=[account],
                args=extract_fields(tree, match.capture(Capture.BODY), mode, queries),
            )
        )
    return instructions


# =============================================================================
# Accounts and types
# =============================================================================


def _unique_by_name(tree: SyntaxTree, matches: list[Match]) -> list[tuple[str, Match]]:
    """Named matches with later duplicates of a name dropped."""
    seen = set()
    unique = []
    for match in matches:
        name = tree.text(match.capture(Capture.NAME))
        if not name or name in seen:
            continue
        seen.add(name)
        unique.append((name, match))
    return unique


def extract_accounts(tree: SyntaxTree, queries: QuerySet = DEFAULT_QUERIES) -> list[AccountTypeDescriptor]:
    """Every struct as an account layout, first declaration of a name wins."""
    return [
        AccountTypeDescriptor(
            name=name,
            fields=extract_fields(tree, match.capture(Capture.BODY), NormalizeMode.ACCOUNT, queries),
        )
        for name, match in _unique_by_name(tree, queries.match(tree.root, QueryKind.STRUCT))
    ]


def _enum_variants(
    tree: SyntaxTree,
    body: Node | None,
    mode: NormalizeMode,
    queries: QuerySet,
) -> list[EnumVariant]:
    if body is None:
        return []

    variants = []
    for variant in body.named_children:
        if variant.type != "enum_variant":
            continue
        name = tree.text(variant.child_by_field_name("name"))
        fields_node = variant.child_by_field_name("body")
        if fields_node is None:
            variants.append(EnumVariant(name=name))
        else:
            variants.append(EnumVariant(name=name, fields=extract_fields(tree, fields_node, mode, queries)))
    return variants


def extract_types(
    tree: SyntaxTree,
    queries: QuerySet = DEFAULT_QUERIES,
    mode: NormalizeMode = NormalizeMode.FIELD,
) -> list[TypeCatalogEntry]:
    """Every struct and enum, first declaration of a name wins across both."""
    entries = []
    for name, match in _unique_by_name(tree, queries.match(tree.root, QueryKind.STRUCT_OR_ENUM)):
        body = match.capture(Capture.BODY)
        if match.node.type == "enum_item":
            shape = EnumShape(variants=_enum_variants(tree, body, mode, queries))
        else:
            shape = StructShape(fields=extract_fields(tree, body, mode, queries))
        entries.append(TypeCatalogEntry(name=name, shape=shape))
    return entries


# =============================================================================
# Errors
# =============================================================================


def parse_integer_literal(text: str) -> int | None:
    """Value of a Rust integer literal, or None if it cannot be read."""
    digits = INTEGER_SUFFIX_RE.sub("", text.replace("_", ""))
    base = INTEGER_RADIX.get(digits[:2].lower(), 10)
    if base != 10:
        digits = digits[2:]
    try:
        return int(digits, base)
    except ValueError:
        return None


def extract_errors(
    tree: SyntaxTree,
    queries: QuerySet = DEFAULT_QUERIES,
    threshold: int = DEFAULT_ERROR_CODE_THRESHOLD,
) -> list[ErrorDescriptor]:
    """Every integer literal above ``threshold``, repeats included."""
    errors = []
    for match in queries.match(tree.root, QueryKind.INTEGER):
        value = parse_integer_literal(tree.text(match.node))
        if value is not None and value > threshold:
            errors.append(ErrorDescriptor.from_code(value))
    return errors
