"""arch-idl: derive an Interface Description (IDL) from on-chain Rust program source."""

__version__ = "0.1.0"
