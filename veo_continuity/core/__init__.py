"""
Core Module
===========

Configuration, exceptions, and security helpers for Veo Continuity.
"""

from .config import Config, ApiConfig, PollingConfig, ModelsConfig, OutputConfig, get_config, set_config
from .exceptions import (
    StudioError,
    ConfigurationError,
    ValidationError,
    InvalidContinuationError,
    UpstreamRequestError,
    GenerationFailedError,
    MissingResultError,
    AssetFetchError,
    GenerationCancelledError,
    GenerationTimeoutError,
    ResourceNotFoundError,
    SecurityError,
)
from .security import PathValidator, sanitize_filename, sanitize_prompt, redact_api_key

__all__ = [
    # Configuration
    "Config",
    "ApiConfig",
    "PollingConfig",
    "ModelsConfig",
    "OutputConfig",
    "get_config",
    "set_config",
    # Exceptions
    "StudioError",
    "ConfigurationError",
    "ValidationError",
    "InvalidContinuationError",
    "UpstreamRequestError",
    "GenerationFailedError",
    "MissingResultError",
    "AssetFetchError",
    "GenerationCancelledError",
    "GenerationTimeoutError",
    "ResourceNotFoundError",
    "SecurityError",
    # Security
    "PathValidator",
    "sanitize_filename",
    "sanitize_prompt",
    "redact_api_key",
]
