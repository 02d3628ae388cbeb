"""Tests for the MCP server."""

import asyncio
import json

from arch_idl import server
from arch_idl.config import ConfigError
from arch_idl.server import call_tool, list_tools


def call(name: str, arguments: dict) -> str:
    (content,) = asyncio.run(call_tool(name, arguments))
    return content.text


class TestListTools:
    """Tests for tool listing."""

    def test_tool_names(self):
        tools = asyncio.run(list_tools())
        assert [t.name for t in tools] == [
            "arch_generate_idl",
            "arch_validate_idl",
            "arch_idl_summary",
        ]


class TestGenerateTool:
    """Tests for arch_generate_idl."""

    def test_returns_idl_json(self, program_source):
        data = json.loads(call("arch_generate_idl", {"source": program_source}))
        assert data["version"] == "0.1.0"
        assert len(data["instructions"]) == 2

    def test_empty_source_rejected(self):
        assert call("arch_generate_idl", {"source": ""}).startswith("Validation error")

    def test_missing_source_rejected(self):
        assert call("arch_generate_idl", {}).startswith("Validation error")

    def test_invalid_config_reported(self, program_source, monkeypatch):
        """A broken configuration is answered with text, not an exception."""

        def broken_config():
            raise ConfigError("indent must be between 0 and 8, got 99")

        monkeypatch.setattr(server, "load_config", broken_config)
        for tool in ("arch_generate_idl", "arch_idl_summary"):
            text = call(tool, {"source": program_source})
            assert text.startswith("Configuration error")
            assert "indent" in text


class TestValidateTool:
    """Tests for arch_validate_idl."""

    def test_valid_object(self, named_program_source):
        idl = json.loads(call("arch_generate_idl", {"source": named_program_source}))
        assert call("arch_validate_idl", {"idl": idl}) == "Valid IDL: counter_program"

    def test_valid_text(self, named_program_source):
        idl = call("arch_generate_idl", {"source": named_program_source})
        assert call("arch_validate_idl", {"idl": idl}) == "Valid IDL: counter_program"

    def test_invalid_document(self):
        text = call("arch_validate_idl", {"idl": {"name": "p"}})
        assert text.startswith("Validation error")


class TestSummaryTool:
    """Tests for arch_idl_summary."""

    def test_summary(self, program_source):
        text = call("arch_idl_summary", {"source": program_source})
        assert text.startswith("# solana_program (IDL v0.1.0)")
        assert "- **instructions**: 2" in text
        assert "- 6001: CustomError6001" in text


def test_unknown_tool():
    assert call("arch_deploy", {}) == "Unknown tool: arch_deploy"
