"""
DiskCensus configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_enabled: bool = False
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: Path.home() / ".diskcensus" / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class DiskpartConfig(BaseModel):
    """Configuration for the external partitioning tool."""

    # {script} and {output} are replaced with the temporary file paths
    command: list[str] = Field(
        default_factory=lambda: ["diskpart.exe", "/s", "{script}"],
        min_length=1,
    )
    timeout_seconds: float = Field(default=120.0, gt=0)
    poll_interval_seconds: float = Field(default=1.0, gt=0, le=60)
    exit_grace_seconds: float = Field(default=0.5, ge=0, le=10)
    script_encoding: str = "ascii"
    output_encoding: str = "utf-8"
    temp_directory: Path | None = None

    @field_validator("temp_directory", mode="before")
    @classmethod
    def expand_temp_path(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()


class AttributeConfig(BaseModel):
    """Configuration for boolean disk attribute lookups."""

    enabled: bool = True
    powershell: str = "powershell.exe"
    timeout_seconds: int = Field(default=60, ge=1, le=600)


class ExportConfig(BaseModel):
    """Configuration for inventory export."""

    default_format: Literal["table", "json", "csv"] = "table"
    csv_delimiter: str = Field(default=",", min_length=1, max_length=1)


class CensusConfig(BaseModel):
    """Main DiskCensus configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    diskpart: DiskpartConfig = Field(default_factory=DiskpartConfig)
    attributes: AttributeConfig = Field(default_factory=AttributeConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> CensusConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = Path.home() / ".diskcensus" / "config.json"

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = Path.home() / ".diskcensus" / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)
        if self.diskpart.temp_directory:
            self.diskpart.temp_directory.mkdir(parents=True, exist_ok=True)


def load_config(config_path: Path | None = None) -> CensusConfig:
    """Load or create configuration."""
    config = CensusConfig.load(config_path)
    config.ensure_directories()
    return config
