"""
Configuration models and loader.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from innertube.exceptions import ConfigError
from innertube.session import CLIENTS

VISITOR_DATA_ENV = "YTM_VISITOR_DATA"
COOKIE_ENV = "YTM_COOKIE"


class ClientSettings(BaseModel):
    """Client configuration settings."""

    gl: str = "US"
    hl: str = "en"
    client: str = "WEB_REMIX"
    visitor_data: Optional[str] = None
    cookie: Optional[str] = None
    timeout: float = Field(default=10.0, gt=0)  # Per-attempt timeout in seconds
    max_retries: int = Field(default=3, ge=0)
    backoff_factor: float = Field(default=0.5, ge=0)
    max_backoff: float = Field(default=8.0, ge=0)
    max_pages: int = Field(default=20, ge=1)  # Pagination guard
    workers: int = Field(default=4, ge=1)
    proxy: Optional[str] = None
    log_level: str = "INFO"

    @field_validator("client")
    @classmethod
    def validate_client(cls, value: str) -> str:
        if value not in CLIENTS:
            raise ValueError(
                f"Unknown client '{value}' (choose from {', '.join(CLIENTS)})"
            )
        return value

    def model_post_init(self, __context) -> None:
        """Let environment variables override credentials from the file."""
        env_visitor = os.getenv(VISITOR_DATA_ENV)
        if env_visitor:
            self.visitor_data = env_visitor
        env_cookie = os.getenv(COOKIE_ENV)
        if env_cookie:
            self.cookie = env_cookie


class InnerTubeConfig(BaseModel):
    """Main configuration model."""

    version: Literal["1.0"]
    settings: ClientSettings = Field(default_factory=ClientSettings)

    @classmethod
    def from_yaml(cls, path: str) -> "InnerTubeConfig":
        """
        Load and validate configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            InnerTubeConfig instance

        Raises:
            ConfigError: If file not found or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {path}")

        # YAML reads 1.0 as a float
        version = data.get("version")
        if str(version) != "1.0":
            raise ConfigError(f"Invalid version: {version}. Expected 1.0")
        data["version"] = "1.0"

        if data.get("settings") is None:
            data["settings"] = {}

        try:
            return cls(**data)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(config_path: str) -> InnerTubeConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        InnerTubeConfig instance
    """
    return InnerTubeConfig.from_yaml(config_path)
