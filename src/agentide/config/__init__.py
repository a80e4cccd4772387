"""agentide configuration."""

from agentide.config.loader import ConfigError, load_config, user_config_dir, user_config_path
from agentide.config.saver import save_config
from agentide.config.schema import (
    AgentIdeConfig,
    BackendConfig,
    ConversationConfig,
    SafetyConfig,
    UIConfig,
)

__all__ = [
    "AgentIdeConfig",
    "BackendConfig",
    "ConfigError",
    "ConversationConfig",
    "SafetyConfig",
    "UIConfig",
    "load_config",
    "save_config",
    "user_config_dir",
    "user_config_path",
]
