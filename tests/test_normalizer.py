"""Tests for type normalization and field extraction."""

import pytest

from arch_idl.extractor.normalizer import NormalizeMode, camel_case, extract_fields
from arch_idl.extractor.parser import DEFAULT_QUERIES, Capture, QueryKind, parse
from arch_idl.extractor.shapes import Named, Option, Primitive, Tuple, Vector


def fields_of(source: str, mode: NormalizeMode = NormalizeMode.FIELD) -> list[dict]:
    """Fields of the first struct in ``source``, in wire format."""
    tree = parse(source)
    match = DEFAULT_QUERIES.match(tree.root, QueryKind.STRUCT)[0]
    return [f.to_dict() for f in extract_fields(tree, match.capture(Capture.BODY), mode)]


def field_type(type_text: str, mode: NormalizeMode = NormalizeMode.FIELD):
    """Normalized wire type of a single field declared with ``type_text``."""
    fields = fields_of(f"struct S {{ f: {type_text} }}", mode)
    assert len(fields) == 1
    return fields[0]["type"]


class TestCamelCase:
    """Tests for field name conversion."""

    def test_lowercases_first_letter_only(self):
        """Only the first character changes."""
        assert camel_case("Amount") == "amount"
        assert camel_case("Total_Amount") == "total_Amount"

    def test_snake_case_untouched(self):
        """snake_case is not converted to camelCase."""
        assert camel_case("lamports_per_byte") == "lamports_per_byte"

    def test_empty(self):
        assert camel_case("") == ""


class TestFieldMode:
    """Tests for the default normalization used by instructions and types."""

    @pytest.mark.parametrize("primitive", ["u8", "u64", "i128", "bool", "usize", "f64", "char"])
    def test_primitives(self, primitive):
        """Primitive types are spelled as in source."""
        assert field_type(primitive) == primitive

    def test_named_type(self):
        """User types stay opaque names."""
        assert field_type("Pubkey") == "Pubkey"

    def test_scoped_type(self):
        """Paths are kept as written."""
        assert field_type("solana_program::pubkey::Pubkey") == "solana_program::pubkey::Pubkey"

    def test_vec_of_primitive(self):
        assert field_type("Vec<u8>") == {"vec": "u8"}

    def test_vec_of_named(self):
        assert field_type("Vec<String>") == {"vec": "String"}

    def test_nested_vec(self):
        """Nested vectors normalize recursively."""
        assert field_type("Vec<Vec<u16>>") == {"vec": {"vec": "u16"}}

    def test_vec_without_element_falls_back_to_u8(self):
        """A Vec with no type argument becomes a vector of u8."""
        assert field_type("Vec<'a>") == {"vec": "u8"}

    def test_vec_inside_other_generic(self):
        """Any type whose text contains Vec< becomes a vector of the inner element."""
        assert field_type("Option<Vec<u32>>") == {"vec": "u32"}

    def test_vec_of_tuple_falls_back_to_u8(self):
        """Only named or primitive arguments count as a vector element."""
        assert field_type("Vec<(u8, u16)>") == {"vec": "u8"}
        assert field_type("Vec<[u8; 32]>") == {"vec": "u8"}

    def test_vec_nested_in_map_value(self):
        assert field_type("HashMap<String, Vec<Pubkey>>") == {"vec": "Pubkey"}

    def test_option_is_opaque(self):
        """Generics other than Vec are not decomposed."""
        assert field_type("Option<u64>") == "Option<u64>"

    def test_tuple_is_opaque(self):
        assert field_type("(u8, u16)") == "(u8, u16)"

    def test_array_is_opaque(self):
        assert field_type("[u8; 32]") == "[u8; 32]"


class TestAccountMode:
    """Tests for the narrower account layout normalization."""

    def test_vec_not_unwrapped(self):
        """Account layouts keep Vec as an opaque name."""
        assert field_type("Vec<u64>", NormalizeMode.ACCOUNT) == "Vec<u64>"

    def test_primitive(self):
        assert field_type("u32", NormalizeMode.ACCOUNT) == "u32"


class TestStructuralMode:
    """Tests for the opt-in structural normalization."""

    def test_option(self):
        assert field_type("Option<u64>", NormalizeMode.STRUCTURAL) == {"option": "u64"}

    def test_tuple(self):
        assert field_type("(u8, Vec<u16>)", NormalizeMode.STRUCTURAL) == {
            "tuple": ["u8", {"vec": "u16"}]
        }

    def test_option_of_vec(self):
        assert field_type("Option<Vec<u8>>", NormalizeMode.STRUCTURAL) == {"option": {"vec": "u8"}}

    def test_other_generics_stay_opaque(self):
        assert field_type("HashMap<u8, u8>", NormalizeMode.STRUCTURAL) == "HashMap<u8, u8>"


class TestExtractFields:
    """Tests for field extraction from struct and variant bodies."""

    def test_named_fields_in_order(self):
        """Fields keep declaration order and get camel-cased names."""
        fields = fields_of("struct S { pub Owner: Pubkey, pub balance: u64 }")
        assert fields == [
            {"name": "owner", "type": "Pubkey"},
            {"name": "balance", "type": "u64"},
        ]

    def test_reference_fields_dropped(self):
        """Fields with reference types are skipped silently."""
        fields = fields_of("struct S<'a> { name: &'a str, len: u32 }")
        assert fields == [{"name": "len", "type": "u32"}]

    def test_tuple_struct(self):
        """Tuple bodies get positional names."""
        fields = fields_of("struct Pair(u8, Vec<u8>);")
        assert fields == [
            {"name": "field0", "type": "u8"},
            {"name": "field1", "type": {"vec": "u8"}},
        ]

    def test_unit_struct(self):
        assert fields_of("struct Marker;") == []

    def test_shapes(self):
        """Type shapes are plain immutable values."""
        assert Vector(Primitive("u8")) == Vector(Primitive("u8"))
        assert Named("Pubkey").to_idl() == "Pubkey"
        assert Tuple((Primitive("u8"), Option(Named("T")))).to_idl() == {
            "tuple": ["u8", {"option": "T"}]
        }
