"""Configuration saver for persisting agentide config changes."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomli_w

from agentide.config.loader import user_config_path
from agentide.config.schema import AgentIdeConfig


def _drop_none(value: Any) -> Any:
    """TOML has no null; omit unset values."""
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


def _config_to_dict(config: AgentIdeConfig) -> dict[str, Any]:
    """Convert AgentIdeConfig to a TOML-compatible dictionary."""
    data = config.model_dump(mode="python")

    # Path objects are not TOML types
    root = data["safety"].get("project_root")
    if root is not None:
        data["safety"]["project_root"] = str(root)

    return _drop_none(data)


def save_config(config: AgentIdeConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    Args:
        config: AgentIdeConfig instance to save.
        path: Path to save to. Defaults to ~/.config/agentide/config.toml.

    Returns:
        The path written.
    """
    if path is None:
        path = user_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "wb") as f:
        tomli_w.dump(_config_to_dict(config), f)
    return path
