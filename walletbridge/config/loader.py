"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel, to_snake

from walletbridge.config.schema import BridgeConfig
from walletbridge.utils.exceptions import ConfigError


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".walletbridge" / "config.json"


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to use defaults."
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_config(config_path: Path | None = None) -> BridgeConfig:
    """
    Load configuration from file, falling back to defaults.

    Keys may be camelCase (``chainId``, ``rpcUrl``) as page templates write
    them. ``WALLETBRIDGE_*`` environment variables (nested with ``__``) fill in
    anything the file leaves unset.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Raises:
        ConfigError: unreadable file, non-object JSON or invalid values.
    """
    path = config_path or get_config_path()
    data = _read_json(path) if path.exists() else {}
    try:
        return BridgeConfig(**convert_keys(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


def save_config(config: BridgeConfig, config_path: Path | None = None) -> None:
    """Write configuration as camelCase JSON, creating the directory if needed."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(convert_to_camel(config.model_dump()), indent=2), encoding="utf-8")


def _convert(data: Any, rename) -> Any:
    if isinstance(data, dict):
        return {rename(k): _convert(v, rename) for k, v in data.items()}
    if isinstance(data, list):
        return [_convert(item, rename) for item in data]
    return data


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    return _convert(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase."""
    return _convert(data, snake_to_camel)


def camel_to_snake(name: str) -> str:
    return to_snake(name)


def snake_to_camel(name: str) -> str:
    return to_camel(name)
