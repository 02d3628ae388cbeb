"""Extract an IDL document from Rust program source."""

from .generator import GenerationError, IdlGenerator, generate_idl, write_idl
from .parser import IdlError, ParseError, RustSourceParser
from .shapes import IdlDocument

__all__ = [
    "generate_idl",
    "write_idl",
    "IdlGenerator",
    "IdlDocument",
    "RustSourceParser",
    "IdlError",
    "ParseError",
    "GenerationError",
]
