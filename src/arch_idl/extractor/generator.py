"""Assemble an IDL document from Rust program source."""

from pathlib import Path

from ..config import GenerationConfig
from ..logging import get_logger
from .extractors import (
    extract_accounts,
    extract_errors,
    extract_instructions,
    extract_types,
    resolve_program_name,
)
from .normalizer import NormalizeMode
from .parser import DEFAULT_QUERIES, IdlError, ParseError, QuerySet, RustSourceParser
from .shapes import IdlDocument

logger = get_logger("generator")


class GenerationError(IdlError):
    """Raised when no IDL can be produced because the source could not be parsed."""

    pass


class IdlGenerator:
    """Run every extractor over one parsed source and collect the results.

    The generator holds no per-call state, so one instance may serve
    concurrent callers.
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        queries: QuerySet = DEFAULT_QUERIES,
        parser: RustSourceParser | None = None,
    ):
        self.config = config or GenerationConfig()
        self.queries = queries
        self.parser = parser or RustSourceParser()

    @property
    def field_mode(self) -> NormalizeMode:
        if self.config.structural_generics:
            return NormalizeMode.STRUCTURAL
        return NormalizeMode.FIELD

    def generate(self, source: str | bytes) -> IdlDocument:
        """
        Generate the IDL for a single Rust source file.

        An empty document is a valid result: it means nothing recognizable was
        found, not that generation failed.

        Raises:
            GenerationError: If the source could not be parsed
        """
        try:
            tree = self.parser.parse(source)
        except ParseError as e:
            logger.error("IDL generation failed: %s", e)
            raise GenerationError(f"Failed to parse program source: {e}") from e

        idl = IdlDocument(
            name=resolve_program_name(tree, self.queries),
            instructions=extract_instructions(tree, self.queries, self.field_mode),
            accounts=extract_accounts(tree, self.queries),
            types=extract_types(tree, self.queries, self.field_mode),
            errors=extract_errors(tree, self.queries, self.config.error_code_threshold),
        )

        logger.debug(
            "Generated IDL for %s", idl.name, extra={"program": idl.name, "catalogs": idl.summary()}
        )
        return idl


def generate_idl(source: str | bytes, config: GenerationConfig | None = None) -> IdlDocument:
    """Generate an IDL document with a default generator."""
    return IdlGenerator(config=config).generate(source)


def write_idl(idl: IdlDocument, output_dir: Path, indent: int = 2) -> Path:
    """
    Write an IDL document to ``<output_dir>/<name>.json``.

    Returns:
        Path of the written file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{idl.name}.json"

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(idl.to_json(indent=indent))
        f.write("\n")

    logger.info("Wrote IDL to %s", output_path, extra={"program": idl.name, "path": str(output_path)})
    return output_path
