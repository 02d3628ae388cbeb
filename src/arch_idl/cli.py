"""CLI for arch-idl.

Commands:
- generate: Derive an IDL document from a Rust source file
- validate: Check an IDL JSON document against the schema
- summary: Show what an IDL for a source file would contain
- init-config: Write a config file with the current settings
- serve: Run the MCP server over stdio
"""

import sys
from pathlib import Path

import click
from pydantic import ValidationError

from .config import DEFAULT_CONFIG_DIR, MAX_INDENT, ConfigError, load_config, save_config
from .extractor import GenerationError, IdlDocument, generate_idl, write_idl
from .logging import setup_logging
from .models import validate_idl


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.arch-idl/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config_path: Path | None, verbose: bool):
    """arch-idl - derive an Interface Description from on-chain Rust programs."""
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path=config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        json_format=config.logging.json_format,
    )
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path or DEFAULT_CONFIG_DIR / "config.yaml"


def _generate_or_exit(ctx, source: bytes) -> IdlDocument:
    try:
        return generate_idl(source, config=ctx.obj["config"].generation)
    except GenerationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("source", type=click.File("rb"))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Write the IDL to this file",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Write the IDL to <dir>/<program name>.json",
)
@click.option("--indent", type=click.IntRange(0, MAX_INDENT), help="JSON indentation")
@click.pass_context
def generate(ctx, source, output: Path | None, output_dir: Path | None, indent: int | None):
    """Generate the IDL for SOURCE (use - for stdin)."""
    config = ctx.obj["config"]
    if indent is None:
        indent = config.output.indent

    idl = _generate_or_exit(ctx, source.read())

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(idl.to_json(indent=indent) + "\n", encoding="utf-8")
        click.echo(f"Wrote IDL to {output}", err=True)
        return

    output_dir = output_dir or config.output.directory
    if output_dir:
        path = write_idl(idl, output_dir, indent=indent)
        click.echo(f"Wrote IDL to {path}", err=True)
        return

    click.echo(idl.to_json(indent=indent))


@main.command()
@click.argument("idl_file", type=click.File("r", encoding="utf-8"))
def validate(idl_file):
    """Validate an IDL JSON document."""
    try:
        model = validate_idl(idl_file.read())
    except ValidationError as e:
        click.echo(click.style("✗", fg="red") + f" Invalid IDL: {e}", err=True)
        sys.exit(1)

    click.echo(
        click.style("✓", fg="green")
        + f" Valid IDL: {model.name} v{model.version}"
        + f" ({len(model.instructions)} instructions, {len(model.accounts)} accounts,"
        + f" {len(model.types)} types, {len(model.errors)} errors)"
    )


@main.command()
@click.argument("source", type=click.File("rb"))
@click.pass_context
def summary(ctx, source):
    """Summarize the IDL for SOURCE (use - for stdin)."""
    idl = _generate_or_exit(ctx, source.read())

    click.echo(f"Program: {click.style(idl.name, bold=True)} (IDL v{idl.version})")
    for catalog, count in idl.summary().items():
        click.echo(f"  {catalog.capitalize()}: {count}")

    if idl.instructions:
        click.echo("\nInstructions:")
        for ix in idl.instructions:
            args = ", ".join(arg.name for arg in ix.args)
            click.echo(f"  {ix.name}({args})")

    if idl.types:
        click.echo("\nTypes:")
        for entry in idl.types:
            click.echo(f"  {entry.name} [{entry.shape.to_dict()['kind']}]")


@main.command("init-config")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init_config(ctx, force: bool):
    """Write the effective configuration to the config file."""
    config_path = ctx.obj["config_path"]
    if config_path.exists() and not force:
        click.echo(f"Config already exists: {config_path} (use --force to overwrite)")
        return

    save_config(ctx.obj["config"], config_path)
    click.echo(f"Wrote config to {config_path}")


@main.command()
def serve():
    """Run the MCP server over stdio."""
    from .server import run

    run()


if __name__ == "__main__":
    main()
