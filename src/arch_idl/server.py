"""MCP server for arch-idl.

Exposes tools for generating and validating program IDLs.
"""

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from .config import ConfigError, load_config
from .extractor import GenerationError, IdlGenerator
from .logging import get_logger
from .models import GenerateIdlInput, ValidateIdlInput, validate_idl

logger = get_logger("server")

# Initialize server
server = Server("arch-idl")

SOURCE_SCHEMA = {
    "type": "object",
    "properties": {
        "source": {
            "type": "string",
            "description": "Rust source of the program (a single file)",
        },
    },
    "required": ["source"],
}


def _generator() -> IdlGenerator:
    return IdlGenerator(config=load_config().generation)


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="arch_generate_idl",
            description=(
                "Generate the IDL (instructions, accounts, types, errors) of an "
                "on-chain Rust program from its source."
            ),
            inputSchema=SOURCE_SCHEMA,
        ),
        Tool(
            name="arch_validate_idl",
            description="Check that an IDL JSON document is well formed.",
            inputSchema={
                "type": "object",
                "properties": {
                    "idl": {
                        "type": ["object", "string"],
                        "description": "IDL document, as an object or JSON text",
                    },
                },
                "required": ["idl"],
            },
        ),
        Tool(
            name="arch_idl_summary",
            description="Summarize what the IDL of a Rust program would contain.",
            inputSchema=SOURCE_SCHEMA,
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    if name == "arch_generate_idl":
        try:
            validated = GenerateIdlInput(source=arguments.get("source", ""))
        except ValidationError as e:
            return [TextContent(type="text", text=f"Validation error: {e}")]
        return await handle_generate(validated.source)

    elif name == "arch_validate_idl":
        try:
            validated = ValidateIdlInput(idl=arguments.get("idl", ""))
        except ValidationError as e:
            return [TextContent(type="text", text=f"Validation error: {e}")]
        return await handle_validate(validated.idl)

    elif name == "arch_idl_summary":
        try:
            validated = GenerateIdlInput(source=arguments.get("source", ""))
        except ValidationError as e:
            return [TextContent(type="text", text=f"Validation error: {e}")]
        return await handle_summary(validated.source)

    else:
        return [TextContent(
            type="text",
            text=f"Unknown tool: {name}",
        )]


async def handle_generate(source: str) -> list[TextContent]:
    """Handle IDL generation request."""
    try:
        idl = _generator().generate(source)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e, extra={"tool": "arch_generate_idl"})
        return [TextContent(type="text", text=f"Configuration error: {e}")]
    except GenerationError as e:
        return [TextContent(type="text", text=f"Generation error: {e}")]

    return [TextContent(type="text", text=idl.to_json(indent=2))]


async def handle_validate(idl: dict | str) -> list[TextContent]:
    """Handle IDL validation request."""
    try:
        model = validate_idl(idl)
    except ValidationError as e:
        logger.info(
            "Rejected IDL document: %d validation errors",
            e.error_count(),
            extra={"tool": "arch_validate_idl"},
        )
        return [TextContent(type="text", text=f"Validation error: {e}")]

    return [TextContent(type="text", text=f"Valid IDL: {model.name}")]


async def handle_summary(source: str) -> list[TextContent]:
    """Handle IDL summary request."""
    try:
        idl = _generator().generate(source)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e, extra={"tool": "arch_idl_summary"})
        return [TextContent(type="text", text=f"Configuration error: {e}")]
    except GenerationError as e:
        return [TextContent(type="text", text=f"Generation error: {e}")]

    output = [f"# {idl.name} (IDL v{idl.version})", ""]
    for catalog, count in idl.summary().items():
        output.append(f"- **{catalog}**: {count}")

    if idl.instructions:
        output.append("\n## Instructions")
        for ix in idl.instructions:
            args = ", ".join(f"{arg.name}: {arg.type.to_idl()}" for arg in ix.args)
            output.append(f"- `{ix.name}({args})`")

    if idl.errors:
        output.append("\n## Errors")
        for error in idl.errors:
            output.append(f"- {error.code}: {error.name}")

    return [TextContent(type="text", text="\n".join(output))]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def run():
    """Entry point for the MCP server."""
    import asyncio
    asyncio.run(main())


if __name__ == "__main__":
    run()
