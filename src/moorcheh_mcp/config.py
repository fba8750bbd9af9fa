#!/usr/bin/env python3
"""
Configuration Management - Centralized, validated configuration.

This module provides a single source of truth for all configuration,
replacing scattered env var reads with a validated config object.

The process environment is seeded once from a local key=value file
(``.env`` by default, ``MOORCHEH_ENV_FILE`` to override). Variables already
set in the environment take precedence over the file. There is no reload
while the server runs.

Usage:
    from moorcheh_mcp.config import get_config

    cfg = get_config()
    print(cfg.base_url)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

from .constants import (
    API_KEY_ENV,
    DEFAULT_BASE_URL,
    MIN_API_KEY_LENGTH,
    PLACEHOLDER_API_KEYS,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class Config:
    """
    Validated configuration for the Moorcheh MCP server.

    Treated as immutable once built; every handler reads the same instance.
    """
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    # Where the key=value seed file was looked for
    env_file: Optional[Path] = None

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any validation fails
        """
        errors = []

        key = (self.api_key or "").strip()
        if not key:
            errors.append(
                f"Missing required {API_KEY_ENV}. Set it in the environment "
                f"or add {API_KEY_ENV}=your_key to a .env file."
            )
        elif key.lower() in PLACEHOLDER_API_KEYS or len(key) < MIN_API_KEY_LENGTH:
            errors.append(
                f"{API_KEY_ENV} appears to be invalid or a placeholder. "
                "Use the key from your Moorcheh console."
            )

        parsed = urlparse(self.base_url)
        if parsed.scheme != "https" or not parsed.netloc:
            errors.append(f"base_url must be an https URL, got {self.base_url!r}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )


# Global config cache
_config: Optional[Config] = None


def _read_env_file(path: Path) -> dict[str, str]:
    """Read key=value pairs from an env file; missing file yields nothing."""
    if not path.is_file():
        return {}
    values = dotenv_values(path)
    return {k: v for k, v in values.items() if v is not None}


def get_config(reload: bool = False) -> Config:
    """
    Get validated configuration.

    Loads from the env file and environment variables on first call,
    caches for subsequent calls.

    Args:
        reload: Force reload from the environment

    Returns:
        Validated Config object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config

    if _config is not None and not reload:
        return _config

    env_file = Path(os.environ.get("MOORCHEH_ENV_FILE", ".env")).expanduser()
    settings = _read_env_file(env_file)
    settings.update(os.environ)

    config = Config(
        api_key=settings.get(API_KEY_ENV, "").strip(),
        base_url=settings.get("MOORCHEH_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        log_level=settings.get("MOORCHEH_LOG_LEVEL", "INFO").upper(),
        log_format=settings.get("MOORCHEH_LOG_FORMAT", "text").lower(),
        env_file=env_file,
    )

    config.validate()

    # Log configuration (debug level, no secrets)
    logger.debug("Configuration loaded:")
    logger.debug(f"  base_url: {config.base_url}")
    logger.debug(f"  env_file: {config.env_file}")
    logger.debug(f"  log_format: {config.log_format}")

    _config = config
    return config


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _config
    _config = None
