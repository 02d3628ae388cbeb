"""Configuration management for arch-idl.

Supports loading configuration from:
1. Default values
2. Config file (~/.arch-idl/config.yaml)
3. Environment variables

Configuration precedence: env vars > config file > defaults
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .logging import LOG_LEVELS, get_logger

logger = get_logger("config")

# Default values
DEFAULT_CONFIG_DIR = Path.home() / ".arch-idl"
DEFAULT_ERROR_CODE_THRESHOLD = 500
DEFAULT_INDENT = 2
DEFAULT_LOG_LEVEL = "INFO"

MAX_INDENT = 8
MAX_CONFIG_SIZE = 1024 * 1024  # 1MB


class ConfigError(Exception):
    """Configuration error."""

    pass


@dataclass
class GenerationConfig:
    """IDL extraction settings."""

    error_code_threshold: int = DEFAULT_ERROR_CODE_THRESHOLD
    structural_generics: bool = False

    def validate(self) -> None:
        """Validate configuration.

        Raises ConfigError if validation fails.
        """
        if self.error_code_threshold < 0:
            raise ConfigError(
                f"error_code_threshold must be >= 0, got {self.error_code_threshold}"
            )

        if self.structural_generics:
            logger.info("Structural generics enabled: Option and tuple types will be decomposed")


@dataclass
class OutputConfig:
    """Where and how generated IDL documents are written."""

    indent: int = DEFAULT_INDENT
    directory: Path | None = None

    def validate(self) -> None:
        if not 0 <= self.indent <= MAX_INDENT:
            raise ConfigError(f"indent must be between 0 and {MAX_INDENT}, got {self.indent}")


@dataclass
class LoggingConfig:
    level: str = DEFAULT_LOG_LEVEL
    json_format: bool = False

    def validate(self) -> None:
        if self.level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Invalid log level '{self.level}'. Must be one of: {list(LOG_LEVELS)}")
        self.level = self.level.upper()


@dataclass
class Config:
    """Main configuration container."""

    generation: GenerationConfig = field(default_factory=GenerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Validate all configuration."""
        self.generation.validate()
        self.output.validate()
        self.logging.validate()


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> Config:
    """
    Load configuration from file and environment.

    Args:
        config_path: Explicit path to config file (optional)
        config_dir: Directory to look for config.yaml (default: ~/.arch-idl)

    Returns:
        Validated Config object
    """
    config = Config()

    if config_path is None:
        config_path = (config_dir or DEFAULT_CONFIG_DIR) / "config.yaml"

    # Load from file if exists
    if config_path.exists():
        try:
            config = _load_config_file(config_path)
            logger.debug("Loaded config from %s", config_path)
        except (OSError, TypeError, ValueError, yaml.YAMLError, ConfigError) as e:
            logger.warning("Failed to load config from %s: %s", config_path, e)
            config = Config()

    # Override with environment variables
    config = _apply_env_overrides(config)

    config.validate()

    return config


def _flag(section: dict, key: str, name: str) -> bool:
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}.{key}' must be true or false, got {value!r}")
    return value


def _section(data: dict, name: str) -> dict:
    section = data.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _load_config_file(config_path: Path) -> Config:
    """Load configuration from YAML file."""
    if config_path.stat().st_size > MAX_CONFIG_SIZE:
        raise ConfigError(
            f"Config file too large: {config_path.stat().st_size} > {MAX_CONFIG_SIZE}"
        )

    with open(config_path, encoding="utf-8") as f:
        # Use safe_load to prevent code execution
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    if not isinstance(data, dict):
        raise ConfigError("Config file must be a YAML mapping")

    allowed_keys = {"generation", "output", "logging"}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        logger.warning("Unknown config keys ignored: %s", unknown_keys)

    generation_data = _section(data, "generation")
    generation = GenerationConfig(
        error_code_threshold=int(
            generation_data.get("error_code_threshold", DEFAULT_ERROR_CODE_THRESHOLD)
        ),
        structural_generics=_flag(generation_data, "structural_generics", "generation"),
    )

    output_data = _section(data, "output")
    directory = output_data.get("directory")
    output = OutputConfig(
        indent=int(output_data.get("indent", DEFAULT_INDENT)),
        directory=Path(directory).expanduser() if directory else None,
    )

    logging_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=str(logging_data.get("level", DEFAULT_LOG_LEVEL)),
        json_format=_flag(logging_data, "json_format", "logging"),
    )

    return Config(generation=generation, output=output, logging=logging_config)


def _env_int(name: str, minimum: int, maximum: int | None = None) -> int | None:
    """Read an integer override, or None if it is unset or out of range."""
    raw = os.environ.get(name)
    if not raw:
        return None

    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s: %s", name, raw)
        return None

    if value < minimum or (maximum is not None and value > maximum):
        logger.warning("Ignoring %s=%d: out of range", name, value)
        return None
    return value


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    threshold = _env_int("ARCH_IDL_ERROR_THRESHOLD", minimum=0)
    if threshold is not None:
        config.generation.error_code_threshold = threshold

    indent = _env_int("ARCH_IDL_INDENT", minimum=0, maximum=MAX_INDENT)
    if indent is not None:
        config.output.indent = indent

    env_level = os.environ.get("ARCH_IDL_LOG_LEVEL")
    if env_level:
        if env_level.upper() in LOG_LEVELS:
            config.logging.level = env_level.upper()
        else:
            logger.warning("Invalid ARCH_IDL_LOG_LEVEL: %s", env_level)

    return config


def save_config(config: Config, config_path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        config_path: Path to write config file
    """
    data = {
        "generation": {
            "error_code_threshold": config.generation.error_code_threshold,
            "structural_generics": config.generation.structural_generics,
        },
        "output": {
            "indent": config.output.indent,
            "directory": str(config.output.directory) if config.output.directory else None,
        },
        "logging": {
            "level": config.logging.level,
            "json_format": config.logging.json_format,
        },
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info("Saved config to %s", config_path)
