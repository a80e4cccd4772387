"""Configuration loader with TOML support and merge capability."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from agentide.config.schema import AgentIdeConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AGENTIDE_CONFIG_PATH"
LOCAL_CONFIG_NAME = "agentide.toml"


class ConfigError(Exception):
    """Configuration file is unreadable or does not match the schema."""


def user_config_dir() -> Path:
    return Path.home() / ".config" / "agentide"


def user_config_path() -> Path:
    return user_config_dir() / "config.toml"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def load_config(
    config_path: Path | None = None,
    merge_user: bool = True,
) -> AgentIdeConfig:
    """Load configuration with precedence.

    Priority (highest to lowest):
    1. Provided config_path
    2. $AGENTIDE_CONFIG_PATH
    3. ./agentide.toml (project settings)
    4. ~/.config/agentide/config.toml (user settings)
    5. Built-in defaults (schema)

    Args:
        config_path: Explicit path to config file.
        merge_user: Whether to merge user config from ~/.config/agentide/.

    Returns:
        Merged AgentIdeConfig instance.

    Raises:
        ConfigError: If a config file cannot be parsed or fails validation.
    """
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if config_path is None and env_config:
        config_path = Path(env_config).expanduser()

    config_data: dict[str, Any] = {}
    sources: list[Path] = []

    if merge_user:
        user_path = user_config_path()
        if user_path.exists():
            config_data = _deep_merge(config_data, _read_toml(user_path))
            sources.append(user_path)

    local_path = Path(LOCAL_CONFIG_NAME)
    if local_path.exists():
        config_data = _deep_merge(config_data, _read_toml(local_path))
        sources.append(local_path)

    if config_path is not None:
        if config_path.exists():
            config_data = _deep_merge(config_data, _read_toml(config_path))
            sources.append(config_path)
        else:
            logger.warning("Config file %s does not exist, using defaults", config_path)

    try:
        config = AgentIdeConfig.model_validate(config_data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    logger.debug("Loaded config from %s", [str(p) for p in sources] or "defaults")
    return config
