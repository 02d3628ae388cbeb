"""Logging setup for arch-idl.

Loggers live under the ``arch_idl`` namespace. Records may carry IDL context
through ``extra=`` (see ``CONTEXT_FIELDS``); both formatters render it.
"""

import json
import logging
import sys
from typing import Any, TextIO

ROOT_LOGGER = "arch_idl"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Record attributes rendered as IDL context when present
CONTEXT_FIELDS = ("program", "path", "tool", "catalogs")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class TextFormatter(logging.Formatter):
    """Plain text lines with ``key=value`` context appended."""

    def __init__(self):
        super().__init__(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Route ``arch_idl`` records to a single handler.

    Args:
        level: Level number or name, e.g. "DEBUG"
        json_format: Emit JSON lines instead of text
        stream: Destination (default: stderr at call time, so stdout stays
            free for generated IDL)

    Returns:
        The package root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else TextFormatter())
    root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Child logger ``arch_idl.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
