"""Value types making up an IDL document.

Every value here is produced by a single extraction and serialized with
``to_dict()`` into the wire shape consumed by IDL panels and client generators.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Union

IDL_VERSION = "0.1.0"


@dataclass(frozen=True)
class Primitive:
    """A scalar type spelled exactly as in source (``u8``, ``bool``, ...)."""

    name: str

    def to_idl(self) -> str:
        return self.name


@dataclass(frozen=True)
class Named:
    """A user-defined or otherwise opaque type, kept as source text."""

    name: str

    def to_idl(self) -> str:
        return self.name


@dataclass(frozen=True)
class Vector:
    element: "TypeShape"

    def to_idl(self) -> dict[str, Any]:
        return {"vec": self.element.to_idl()}


@dataclass(frozen=True)
class Tuple:
    elements: tuple["TypeShape", ...]

    def to_idl(self) -> dict[str, Any]:
        return {"tuple": [element.to_idl() for element in self.elements]}


@dataclass(frozen=True)
class Option:
    inner: "TypeShape"

    def to_idl(self) -> dict[str, Any]:
        return {"option": self.inner.to_idl()}


TypeShape = Union[Primitive, Named, Vector, Tuple, Option]


@dataclass(frozen=True)
class Field:
    name: str
    type: TypeShape

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type.to_idl()}


@dataclass(frozen=True)
class AccountRef:
    """An account an instruction expects, with its access flags."""

    name: str
    is_mut: bool
    is_signer: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "isMut": self.is_mut, "isSigner": self.is_signer}


@dataclass(frozen=True)
class InstructionDescriptor:
    name: str
    accounts: list[AccountRef] = field(default_factory=list)
    args: list[Field] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "accounts": [account.to_dict() for account in self.accounts],
            "args": [arg.to_dict() for arg in self.args],
        }


@dataclass(frozen=True)
class AccountTypeDescriptor:
    """An on-chain account layout."""

    name: str
    fields: list[Field] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": {"kind": "struct", "fields": [f.to_dict() for f in self.fields]},
        }


@dataclass(frozen=True)
class EnumVariant:
    """An enum variant; ``fields`` is None for a unit variant."""

    name: str
    fields: list[Field] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.fields is not None:
            data["fields"] = [f.to_dict() for f in self.fields]
        return data


@dataclass(frozen=True)
class StructShape:
    fields: list[Field] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "struct", "fields": [f.to_dict() for f in self.fields]}


@dataclass(frozen=True)
class EnumShape:
    variants: list[EnumVariant] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "enum", "variants": [v.to_dict() for v in self.variants]}


@dataclass(frozen=True)
class TypeCatalogEntry:
    name: str
    shape: StructShape | EnumShape

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.shape.to_dict()}


@dataclass(frozen=True)
class ErrorDescriptor:
    code: int
    name: str
    msg: str

    @classmethod
    def from_code(cls, code: int) -> "ErrorDescriptor":
        return cls(code=code, name=f"CustomError{code}", msg=f"Custom program error {code}")

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name, "msg": self.msg}


@dataclass(frozen=True)
class IdlDocument:
    """The interface description of one program."""

    name: str
    instructions: list[InstructionDescriptor] = field(default_factory=list)
    accounts: list[AccountTypeDescriptor] = field(default_factory=list)
    types: list[TypeCatalogEntry] = field(default_factory=list)
    errors: list[ErrorDescriptor] = field(default_factory=list)
    version: str = IDL_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "name": self.name,
            "instructions": [ix.to_dict() for ix in self.instructions],
            "accounts": [account.to_dict() for account in self.accounts],
            "types": [entry.to_dict() for entry in self.types],
            "errors": [error.to_dict() for error in self.errors],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent or None, ensure_ascii=False)

    def summary(self) -> dict[str, int]:
        """Per-catalog entry counts."""
        return {
            "instructions": len(self.instructions),
            "accounts": len(self.accounts),
            "types": len(self.types),
            "errors": len(self.errors),
        }
