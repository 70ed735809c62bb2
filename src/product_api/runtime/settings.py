"""Environment-level settings.

Only the handful of primitive values needed before ``config.yaml`` can be
located and parsed live here. Everything else belongs in ``ConfigData``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", validation_alias="APP_ENVIRONMENT"
    )
    config_file: str = Field(default="config.yaml", validation_alias="APP_CONFIG_FILE")
