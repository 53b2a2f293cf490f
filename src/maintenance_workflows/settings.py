"""Process-level settings and logging setup.

Settings come from environment variables:

- MAINTENANCE_WORKFLOWS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default INFO)
- MAINTENANCE_WORKFLOWS_DIRECTORY_MODE: octal mode for created directories (default 777)
- MAINTENANCE_WORKFLOWS_COPY_SUFFIX: suffix for CopyFile default targets (default _COPY)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "MAINTENANCE_WORKFLOWS_"
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DIRECTORY_MODE = 0o777


class EngineSettings(BaseModel):
    """Engine configuration (immutable once loaded)."""

    model_config = {"extra": "forbid", "frozen": True}

    log_level: str = Field(default="INFO", description="Root log level")
    directory_mode: int = Field(
        default=DEFAULT_DIRECTORY_MODE,
        ge=0,
        le=0o7777,
        description="Permission bits for directories created by MakeDirectory",
    )
    copy_suffix: str = Field(
        default="_COPY",
        min_length=1,
        description="Suffix appended to the file stem when CopyFile has no target name",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """Build settings from environment variables.

        Invalid values fall back to their defaults with a warning on stderr,
        so a typo in the environment never prevents the engine from starting.
        """
        env = os.environ if environ is None else environ

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            print(
                f"Warning: Invalid {ENV_PREFIX}LOG_LEVEL '{log_level}'. "
                f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}. Using INFO.",
                file=sys.stderr,
            )
            log_level = "INFO"

        raw_mode = env.get(f"{ENV_PREFIX}DIRECTORY_MODE", "")
        directory_mode = DEFAULT_DIRECTORY_MODE
        if raw_mode:
            try:
                directory_mode = max(0, min(0o7777, int(raw_mode, 8)))
            except ValueError:
                print(
                    f"Warning: Invalid {ENV_PREFIX}DIRECTORY_MODE '{raw_mode}' "
                    "(octal expected). Using 777.",
                    file=sys.stderr,
                )

        copy_suffix = env.get(f"{ENV_PREFIX}COPY_SUFFIX", "") or "_COPY"

        return cls(log_level=log_level, directory_mode=directory_mode, copy_suffix=copy_suffix)


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Process-wide settings, read from the environment once."""
    return EngineSettings.from_env()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging to stderr.

    Args:
        level: Log level name (defaults to the configured settings level)
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


__all__ = ["EngineSettings", "get_settings", "configure_logging"]
