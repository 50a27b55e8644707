"""
Configuration Management for RoundSight

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables

Configuration precedence (highest to lowest):
1. Environment variables (ROUNDSIGHT_*)
2. Configuration file
3. Default values
"""

import json
import logging
import logging.handlers
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from roundsight.core.constants import (
    MULTI_KILL_WINDOW_SECONDS,
    ROUND_CLOCK_SECONDS,
    TRADE_WINDOW_SECONDS,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class AnalysisConfig:
    """Timing windows for round analysis."""

    # A kill within this many seconds of a teammate's death is a trade.
    # A gap of exactly this value still counts.
    trade_window_seconds: float = TRADE_WINDOW_SECONDS

    # Maximum gap between consecutive kills of one streak
    multi_kill_window_seconds: float = MULTI_KILL_WINDOW_SECONDS

    # Starting value of the round clock. Records that carry only the
    # remaining clock are converted to elapsed time against it.
    round_clock_seconds: float = ROUND_CLOCK_SECONDS


@dataclass
class ExportConfig:
    """Configuration for data export."""

    default_format: str = "json"
    json_indent: int = 2
    csv_delimiter: str = ","


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class RoundSightConfig:
    """Main configuration container."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    home = Path.home()
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))

    return [
        Path.cwd() / "roundsight.yaml",
        Path.cwd() / "roundsight.toml",
        Path.cwd() / "roundsight.json",
        Path.cwd() / ".roundsight.yaml",
        Path(xdg_config) / "roundsight" / "config.yaml",
        Path(xdg_config) / "roundsight" / "config.toml",
        home / ".roundsight.yaml",
    ]


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


ENV_MAPPINGS = {
    "ROUNDSIGHT_LOG_LEVEL": ("logging", "level"),
    "ROUNDSIGHT_LOG_FILE": ("logging", "file"),
    "ROUNDSIGHT_TRADE_WINDOW_SECONDS": ("analysis", "trade_window_seconds"),
    "ROUNDSIGHT_MULTI_KILL_WINDOW_SECONDS": ("analysis", "multi_kill_window_seconds"),
    "ROUNDSIGHT_ROUND_CLOCK_SECONDS": ("analysis", "round_clock_seconds"),
    "ROUNDSIGHT_EXPORT_FORMAT": ("export", "default_format"),
}


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value: Any = os.environ.get(env_var)
        if value is None:
            continue

        # Type conversion
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        else:
            try:
                value = float(value)
            except ValueError:
                pass

        config.setdefault(section, {})[key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _coerce(value: Any, default: Any) -> Any:
    """Convert a raw config value to the type of the field's default."""
    if default is None or value is None:
        return None if value is None else str(value)
    if isinstance(default, bool):
        if isinstance(value, str):
            if value.lower() not in ("true", "false"):
                raise ValueError(f"not a boolean: {value!r}")
            return value.lower() == "true"
        return bool(value)
    if isinstance(default, (int, float)) and isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    return type(default)(value)


def dict_to_config(data: dict[str, Any]) -> RoundSightConfig:
    """
    Convert a dictionary to RoundSightConfig.

    Unknown keys are ignored. Values are converted to the type of the
    field's default; values that do not convert keep the default.
    """
    config = RoundSightConfig()

    for section_name in ("analysis", "export", "logging"):
        section = getattr(config, section_name)
        for key, value in (data.get(section_name) or {}).items():
            if not hasattr(section, key):
                logger.debug(f"Ignoring unknown config key: {section_name}.{key}")
                continue
            try:
                setattr(section, key, _coerce(value, getattr(section, key)))
            except (TypeError, ValueError):
                logger.warning(f"Invalid value for {section_name}.{key}: {value!r}, keeping default")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> RoundSightConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged RoundSightConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        config_data = merge_configs(config_data, load_env_config())

    return dict_to_config(config_data)


def save_config(config: RoundSightConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (YAML or JSON, detected from extension)
    """
    data = asdict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Apply a LoggingConfig to the ``roundsight`` logger hierarchy."""
    config = config or get_config().logging

    root = logging.getLogger("roundsight")
    root.setLevel(config.level.upper())

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.file,
                maxBytes=config.file_max_bytes,
                backupCount=config.file_backup_count,
            )
        )

    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: RoundSightConfig | None = None


def get_config() -> RoundSightConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: RoundSightConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None
