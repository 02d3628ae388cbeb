"""Tests for the IDL schema and tool input models."""

import pytest
from pydantic import ValidationError

from arch_idl.models import (
    MAX_SOURCE_SIZE,
    GenerateIdlInput,
    ValidateIdlInput,
    validate_idl,
)


def minimal_idl(**overrides) -> dict:
    idl = {
        "version": "0.1.0",
        "name": "vault_program",
        "instructions": [],
        "accounts": [],
        "types": [],
        "errors": [],
    }
    idl.update(overrides)
    return idl


class TestValidateIdl:
    """Tests for IDL schema validation."""

    def test_minimal(self):
        model = validate_idl(minimal_idl())
        assert model.name == "vault_program"

    def test_json_text(self):
        model = validate_idl('{"version": "0.1.0", "name": "p", "instructions": [],'
                             ' "accounts": [], "types": [], "errors": []}')
        assert model.version == "0.1.0"

    def test_invalid_json(self):
        with pytest.raises(ValidationError):
            validate_idl("{not json")

    @pytest.mark.parametrize("key", ["version", "name", "instructions", "accounts", "types", "errors"])
    def test_missing_key(self, key):
        idl = minimal_idl()
        del idl[key]
        with pytest.raises(ValidationError):
            validate_idl(idl)

    def test_unknown_key(self):
        with pytest.raises(ValidationError):
            validate_idl(minimal_idl(extra=True))

    def test_complex_types(self):
        """Nested vec, tuple, option and defined types are accepted."""
        idl = minimal_idl(types=[{
            "name": "Slot",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "a", "type": {"vec": {"vec": "u8"}}},
                    {"name": "b", "type": {"tuple": ["u8", {"option": "u64"}]}},
                    {"name": "c", "type": {"defined": "Pubkey"}},
                ],
            },
        }])
        model = validate_idl(idl)
        assert model.model_dump(by_alias=True, exclude_none=True) == idl

    def test_rejects_unknown_complex_type(self):
        idl = minimal_idl(types=[{
            "name": "Bad",
            "type": {"kind": "struct", "fields": [{"name": "a", "type": {"map": "u8"}}]},
        }])
        with pytest.raises(ValidationError):
            validate_idl(idl)

    def test_struct_requires_fields(self):
        idl = minimal_idl(types=[{"name": "S", "type": {"kind": "struct"}}])
        with pytest.raises(ValidationError, match="fields"):
            validate_idl(idl)

    def test_enum_requires_variants(self):
        idl = minimal_idl(types=[{"name": "E", "type": {"kind": "enum"}}])
        with pytest.raises(ValidationError, match="variants"):
            validate_idl(idl)

    def test_account_flags_required(self):
        idl = minimal_idl(instructions=[{
            "name": "transfer",
            "accounts": [{"name": "account", "isMut": True}],
            "args": [],
        }])
        with pytest.raises(ValidationError):
            validate_idl(idl)

    def test_error_code_must_be_integer(self):
        idl = minimal_idl(errors=[{"code": "many", "name": "E", "msg": "m"}])
        with pytest.raises(ValidationError):
            validate_idl(idl)


class TestGenerateIdlInput:
    """Input validation for generation requests."""

    def test_valid(self):
        assert GenerateIdlInput(source="fn main() {}").source == "fn main() {}"

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            GenerateIdlInput(source="")

    def test_too_large_rejected(self):
        with pytest.raises(ValidationError):
            GenerateIdlInput(source="a" * (MAX_SOURCE_SIZE + 1))


class TestValidateIdlInput:
    """Input validation for validation requests."""

    def test_accepts_object_and_text(self):
        assert ValidateIdlInput(idl={"name": "p"}).idl == {"name": "p"}
        assert ValidateIdlInput(idl="{}").idl == "{}"

    def test_rejects_blank_text(self):
        with pytest.raises(ValidationError, match="empty"):
            ValidateIdlInput(idl="   ")

    def test_rejects_empty_object(self):
        with pytest.raises(ValidationError, match="empty"):
            ValidateIdlInput(idl={})
