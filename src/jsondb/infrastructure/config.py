"""Configuration management for the JSON database engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_dir: Path = Field(default=Path("data"), description="Directory holding the database file")
    file_name: str = Field(default="db.json", min_length=1, description="Database file name")
    default_table: str = Field(
        default="photos", min_length=1, description="Table seeded into a fresh database"
    )
    sync_mode: Literal["fsync", "none"] = Field(
        default="fsync", description="Whether writes are fsynced before the rename"
    )
    indent: int = Field(default=2, ge=0, le=8, description="JSON indentation for the file")

    @property
    def db_path(self) -> Path:
        """Full path of the backing JSON document."""
        return self.data_dir / self.file_name


class EngineConfig(BaseModel):
    """Query engine configuration."""

    update_policy: Literal["error", "ignore"] = Field(
        default="error",
        description="UPDATE handling: raise an error, or report zero affected rows",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    log_parameter_values: bool = Field(
        default=False, description="Write bound parameter values into log events"
    )
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="jsondb", description="Service name for tracing")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled if unset)"
    )


class Config(BaseSettings):
    """Main configuration for the JSON database engine."""

    model_config = SettingsConfigDict(
        env_prefix="JSONDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the data directory exists."""
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
