"""Pydantic configuration models for agentide."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentide.core.agent.policy import (
    DEFAULT_COMMAND_DENYLIST,
    DEFAULT_RESTRICTED_PATHS,
    SafetyPolicy,
)
from agentide.core.conversation import DEFAULT_MAX_HISTORY
from agentide.core.notifications import DEFAULT_CAPACITY


class BackendConfig(BaseModel):
    """Configuration for the chat backend (OpenAI-compatible API)."""

    model_config = ConfigDict(extra="ignore")

    provider: str = "groq"
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.1-70b-versatile"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=4096, gt=0)
    timeout_seconds: float = Field(default=60.0, gt=0)
    api_key: Optional[str] = None
    api_key_env: str = "GROQ_API_KEY"

    def resolve_api_key(self) -> Optional[str]:
        """Explicit key first, then the configured environment variable."""
        if self.api_key:
            return self.api_key
        return os.environ.get(self.api_key_env) or None


class SafetyConfig(BaseModel):
    """Limits applied to every agent action."""

    model_config = ConfigDict(extra="ignore")

    project_root: Optional[Path] = None
    restricted_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESTRICTED_PATHS)
    )
    command_denylist: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMMAND_DENYLIST)
    )
    allow_commands: bool = False
    command_timeout_seconds: float = Field(default=30.0, gt=0)


class UIConfig(BaseModel):
    """TUI settings."""

    model_config = ConfigDict(extra="ignore")

    notification_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    notify_hover: bool = False
    sidebar_width: int = Field(default=36, ge=10)
    chat_height: int = Field(default=14, ge=4)
    tick_interval: float = Field(default=0.1, gt=0)


class ConversationConfig(BaseModel):
    """Chat history settings."""

    model_config = ConfigDict(extra="ignore")

    max_history: int = Field(default=DEFAULT_MAX_HISTORY, ge=2)
    system_prompt: str = (
        "You are an AI coding assistant embedded in a terminal IDE. "
        "Answer concisely."
    )


class AgentIdeConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="ignore")

    backend: BackendConfig = Field(default_factory=BackendConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    conversation: ConversationConfig = Field(default_factory=ConversationConfig)

    @field_validator("safety", mode="after")
    @classmethod
    def _expand_root(cls, value: SafetyConfig) -> SafetyConfig:
        if value.project_root is not None:
            value.project_root = value.project_root.expanduser()
        return value

    def safety_policy(self, project_root: Path | None = None) -> SafetyPolicy:
        """Build the frozen policy; ``project_root`` overrides the configured one."""
        root = project_root or self.safety.project_root or Path.cwd()
        return SafetyPolicy.create(
            root,
            restricted=self.safety.restricted_paths,
            denylist=self.safety.command_denylist,
            allow_commands=self.safety.allow_commands,
        )
