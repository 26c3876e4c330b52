"""Configuration management for mates.

This module handles application configuration using Pydantic settings.
Configuration is loaded from environment variables or a .env file once, at
startup, and then passed explicitly to the components that need it.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_index_path() -> Path:
    return Path.home() / ".mates_index"


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Settings are read from MATES_* variables (e.g., MATES_DIR). The editor
    falls back to the conventional EDITOR variable when MATES_EDITOR is unset.
    Empty variables are treated as unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Storage
    index_path: Path = Field(
        default_factory=_default_index_path,
        validation_alias="MATES_INDEX",
        description="Path to the tab-separated contact index",
    )
    vdir_path: Path = Field(
        validation_alias="MATES_DIR",
        description="Directory of vCard files, one contact per file",
    )
    contact_extension: str = Field(
        default=".vcf",
        description="File name suffix of contact files inside vdir_path",
    )

    # External programs
    editor_cmd: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MATES_EDITOR", "EDITOR"),
        description="Editor used by the edit command",
    )
    grep_cmd: str = Field(
        default="grep",
        validation_alias="MATES_GREP",
        description="Line filter invoked as `<grep_cmd> <query>` with the index on stdin",
    )
    filter_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for the filter process before giving up",
    )

    # Application Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
