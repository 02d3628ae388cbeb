"""Pydantic models for the IDL wire format and tool input validation."""

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Largest source file accepted from tool callers (1MB)
MAX_SOURCE_SIZE = 1024 * 1024


class _IdlModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class IdlVec(_IdlModel):
    vec: "IdlType"


class IdlTuple(_IdlModel):
    items: list["IdlType"] = Field(alias="tuple")


class IdlOption(_IdlModel):
    option: "IdlType"


class IdlDefined(_IdlModel):
    defined: str = Field(..., min_length=1)


IdlType = Union[str, IdlVec, IdlTuple, IdlOption, IdlDefined]

for _model in (IdlVec, IdlTuple, IdlOption):
    _model.model_rebuild()


class IdlField(_IdlModel):
    name: str
    type: IdlType


class IdlAccountItem(_IdlModel):
    name: str
    is_mut: bool = Field(alias="isMut")
    is_signer: bool = Field(alias="isSigner")


class IdlInstruction(_IdlModel):
    name: str
    accounts: list[IdlAccountItem]
    args: list[IdlField]


class IdlAccountBody(_IdlModel):
    kind: Literal["struct"]
    fields: list[IdlField]


class IdlAccount(_IdlModel):
    name: str
    type: IdlAccountBody


class IdlEnumVariant(_IdlModel):
    name: str
    fields: list[IdlField] | None = None


class IdlTypeBody(_IdlModel):
    kind: Literal["struct", "enum"]
    fields: list[IdlField] | None = None
    variants: list[IdlEnumVariant] | None = None

    @model_validator(mode="after")
    def check_kind_members(self) -> "IdlTypeBody":
        if self.kind == "struct" and self.fields is None:
            raise ValueError("struct types require 'fields'")
        if self.kind == "enum" and self.variants is None:
            raise ValueError("enum types require 'variants'")
        return self


class IdlTypeDef(_IdlModel):
    name: str
    type: IdlTypeBody


class IdlErrorCode(_IdlModel):
    code: int
    name: str
    msg: str


class IdlDocumentModel(_IdlModel):
    """Schema of a complete IDL document."""

    version: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    instructions: list[IdlInstruction]
    accounts: list[IdlAccount]
    types: list[IdlTypeDef]
    errors: list[IdlErrorCode]


def validate_idl(data: dict[str, Any] | str) -> IdlDocumentModel:
    """
    Validate an IDL document given as a dict or JSON text.

    Raises:
        pydantic.ValidationError: If the document is not valid JSON or does not match the schema
    """
    if isinstance(data, str):
        return IdlDocumentModel.model_validate_json(data)
    return IdlDocumentModel.model_validate(data)


class GenerateIdlInput(BaseModel):
    """Input validation for IDL generation."""

    source: str = Field(
        ...,
        min_length=1,
        max_length=MAX_SOURCE_SIZE,
        description="Rust source of the program",
    )


class ValidateIdlInput(BaseModel):
    """Input validation for IDL validation."""

    idl: dict[str, Any] | str = Field(..., description="IDL document, as an object or JSON text")

    @field_validator("idl")
    @classmethod
    def validate_not_empty(cls, v: dict[str, Any] | str) -> dict[str, Any] | str:
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("IDL text must not be empty")
            if len(v) > MAX_SOURCE_SIZE:
                raise ValueError(f"IDL text too large: {len(v)} > {MAX_SOURCE_SIZE}")
        elif not v:
            raise ValueError("IDL object must not be empty")
        return v

