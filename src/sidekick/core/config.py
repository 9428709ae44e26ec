"""Configuration management for Sidekick."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from sidekick.errors import ConfigError

CONFIG_FILE = "config.yaml"
DEFAULT_MODEL = "codellama:7b"


class OllamaSettings(BaseModel):
    """Connection and sampling settings."""
    host: str = "http://localhost:11434"
    model: str = ""
    temperature: float = 0.7
    debug: bool = False
    timeout: Optional[float] = None


class ModelSettings(BaseModel):
    """Per-mode model overrides. Empty means use ollama.model."""
    plan: str = ""
    edit: str = ""
    agent: str = ""
    cmd: str = ""
    ask: str = ""


class Config(BaseModel):
    """Sidekick configuration, stored as YAML in the config directory."""
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    models: ModelSettings = Field(default_factory=ModelSettings)

    def model_for_mode(self, mode: str) -> str:
        """Model configured for a mode, falling back to the default model."""
        override = getattr(self.models, mode, "")
        if override:
            return override
        if self.ollama.model:
            return self.ollama.model
        return DEFAULT_MODEL

    @property
    def is_first_run(self) -> bool:
        """No default model chosen yet."""
        return not self.ollama.model

    def save(self) -> Path:
        """Write the configuration to the config directory."""
        config_path = get_config_dir() / CONFIG_FILE
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(), f, sort_keys=False)
        return config_path


def get_config_dir() -> Path:
    """Config directory ($SIDEKICK_CONFIG_DIR or ~/.sidekick), created if missing."""
    override = os.environ.get("SIDEKICK_CONFIG_DIR")
    config_dir = Path(override) if override else Path.home() / ".sidekick"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / CONFIG_FILE


def load_config() -> Config:
    """Load configuration from the config file and environment.

    Environment variables take precedence over the file:
    OLLAMA_HOST, SIDEKICK_MODEL.
    """
    data: dict[str, Any] = {}

    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to read config {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config {config_path} must be a mapping")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e

    if os.environ.get("OLLAMA_HOST"):
        host = os.environ["OLLAMA_HOST"]
        config.ollama.host = host if "://" in host else f"http://{host}"

    if os.environ.get("SIDEKICK_MODEL"):
        config.ollama.model = os.environ["SIDEKICK_MODEL"]

    return config
