"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./products.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def is_in_memory(self) -> bool:
        """Whether the configured backend is an in-memory SQLite database."""
        return self.url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in self.url


class ExecutionConfig(BaseModel):
    """Delayed/immediate execution mode configuration."""

    enabled_by_default: bool = Field(
        default=True, description="Whether the delayed (async-simulated) path starts enabled"
    )
    operation_delay_ms: int = Field(
        default=20, ge=0, description="Simulated I/O delay per single-record operation"
    )
    item_delay_ms: int = Field(
        default=10, ge=0, description="Simulated I/O delay per streamed item"
    )

    @property
    def operation_delay(self) -> float:
        return self.operation_delay_ms / 1000

    @property
    def item_delay(self) -> float:
        return self.item_delay_ms / 1000


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    api_prefix: str = Field(
        default="", description="Path prefix for the product and mode routers, e.g. '/api'"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig, description="Execution mode configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
