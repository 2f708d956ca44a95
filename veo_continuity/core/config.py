"""
Configuration System
====================

Validated configuration with typed dataclasses, loaded from YAML.
"""

import os
import re
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ApiConfig:
    """Remote API connection settings."""

    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: int = 120
    api_key_env: str = "GEMINI_API_KEY"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must be an http(s) URL, got {self.base_url}",
                config_key="api.base_url",
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout}",
                config_key="api.timeout",
            )


@dataclass
class PollingConfig:
    """Long-running operation polling settings."""

    interval: float = 10.0
    # None waits for as long as generation takes
    max_wait: Optional[float] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.interval < 0:
            raise ConfigurationError(
                f"interval must be >= 0, got {self.interval}",
                config_key="polling.interval",
            )
        if self.max_wait is not None and self.max_wait <= 0:
            raise ConfigurationError(
                f"max_wait must be positive, got {self.max_wait}",
                config_key="polling.max_wait",
            )


@dataclass
class ModelsConfig:
    """Model identifiers for each variant."""

    fast: str = "veo-3.1-fast-generate-preview"
    standard: str = "veo-3.1-generate-preview"


@dataclass
class OutputConfig:
    """Where the CLI writes finished scenes."""

    base_path: str = "./output"
    naming_pattern: str = "scene_{scene}.mp4"


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class Config:
    """
    Main configuration container with validation and loading.

    Supports ${VAR} and ${VAR:-default} interpolation in string values.
    """

    api: ApiConfig = field(default_factory=ApiConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    models: ModelsConfig = field(default_factory=ModelsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from the first YAML file found.

        Args:
            path: Explicit config file, searched before the defaults

        Returns:
            Validated Config instance
        """
        search_paths = [
            Path("./config/studio.yaml"),
            Path("./studio.yaml"),
            Path.home() / ".veo-continuity" / "config.yaml",
        ]

        if path:
            if not Path(path).exists():
                raise ConfigurationError(f"Config file not found: {path}", config_key=str(path))
            search_paths.insert(0, Path(path))

        config_data = {}

        for search_path in search_paths:
            if search_path.exists():
                logger.info(f"Loading config from: {search_path}")
                try:
                    with open(search_path, "r") as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid YAML in config file: {e}",
                        config_key=str(search_path),
                    )
        else:
            logger.info("No config file found, using defaults")

        config_data = cls._interpolate_env_vars(config_data)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary with validation."""
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")
        try:
            return cls(
                api=ApiConfig(**data.get("api", {})),
                polling=PollingConfig(**data.get("polling", {})),
                models=ModelsConfig(**data.get("models", {})),
                output=OutputConfig(**data.get("output", {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def _interpolate_env_vars(data: Any) -> Any:
        """Recursively interpolate ${VAR} patterns with environment variables."""
        if isinstance(data, str):
            pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

            def replace(match):
                return os.environ.get(match.group(1), match.group(2) or "")

            return re.sub(pattern, replace, data)
        elif isinstance(data, dict):
            return {k: Config._interpolate_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [Config._interpolate_env_vars(item) for item in data]
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {section: asdict(getattr(self, section)) for section in ["api", "polling", "models", "output"]}


# =============================================================================
# Convenience Functions
# =============================================================================


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance (lazily loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = Config.load()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload on next access)."""
    global _global_config
    _global_config = None
