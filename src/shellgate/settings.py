"""Environment-driven defaults for command validation."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class GuardSettings(BaseSettings):
    """Configuration shared by the sandbox and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="SHELLGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    SKILLS_PATHS: str = Field(
        default="",
        description="Comma-separated skills directories whose scripts may run unchecked.",
    )
    INCLUDE_BUILTINS: bool = Field(
        default=True,
        description="Merge the builtin read-only allowlist into every sandbox.",
    )
    RESPECT_GITIGNORE: bool = Field(
        default=True,
        description="Treat paths matched by the project's .gitignore as unsafe.",
    )
    LOG_LEVEL: str = Field(
        default="WARNING",
        description="Logging level applied by the CLI.",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"SHELLGATE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return normalized

    @property
    def skills_paths(self) -> list[str]:
        return [item.strip() for item in self.SKILLS_PATHS.split(",") if item.strip()]

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)


@lru_cache
def get_guard_settings() -> GuardSettings:
    """Return cached settings; tests clear the cache between cases."""
    return GuardSettings()


__all__ = ["GuardSettings", "get_guard_settings"]
