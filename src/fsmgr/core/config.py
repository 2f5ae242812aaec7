"""
fsmgr configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from fsmgr.core.properties import PropertyStore

DEFAULT_CONFIG_PATH = Path.home() / ".fsmgr" / "config.json"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_enabled: bool = False
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: Path.home() / ".fsmgr" / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class ToolsConfig(BaseModel):
    """Locations of the external filesystem tools."""

    mke2fs: str = "/system/bin/mke2fs"
    e2fsdroid: str = "/system/bin/e2fsdroid"
    make_f2fs: str = "/system/bin/make_f2fs"
    resize_f2fs: str = "/system/bin/resize.f2fs"
    newfs_msdos: str = "/system/bin/newfs_msdos"

    @field_validator("*")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("tool path must not be empty")
        return v.strip()


class FsMgrConfig(BaseModel):
    """Main fsmgr configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    property_files: list[Path] = Field(default_factory=list)

    @classmethod
    def load(cls, config_path: Path | None = None) -> FsMgrConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)

    def load_properties(self) -> PropertyStore:
        """Build a property store from the configured property files.

        Later files override earlier ones. Missing files are skipped.
        """
        store = PropertyStore()
        for path in self.property_files:
            if path.exists():
                store.update(PropertyStore.from_file(path))
        return store


def get_default_config() -> FsMgrConfig:
    """Get the default configuration."""
    return FsMgrConfig()


def load_config(config_path: Path | None = None) -> FsMgrConfig:
    """Load or create configuration."""
    config = FsMgrConfig.load(config_path)
    config.ensure_directories()
    return config
