"""
rtest Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Nested BaseSettings classes read os.environ, so load .env up front
load_dotenv()


class RunnerSettings(BaseSettings):
    """External test command settings."""

    model_config = SettingsConfigDict(env_prefix="RTEST_")

    command: str = Field(default="go", description="Test executable")
    subcommand: str = Field(default="test", description="Fixed first argument")
    source_extension: str = Field(default=".go", description="Extension that triggers a run")
    excluded_dir: str = Field(default="vendor", description="Directory name never watched")
    throttle_max_entries: int = Field(default=4096, ge=1)

    @field_validator("source_extension", mode="before")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Accept extensions with or without the leading dot."""
        v = v.strip()
        if v and not v.startswith("."):
            return f".{v}"
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="rtest")
    app_version: str = Field(default="0.1.0")

    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Process start configuration, read-only after startup."""

    root: Path
    debug: bool = False
    extra_args: tuple[str, ...] = field(default_factory=tuple)
    read_stdin: bool = True
