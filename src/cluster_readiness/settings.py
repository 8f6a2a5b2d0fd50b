"""Configuration using Pydantic Settings.

This module centralizes runtime defaults for readiness waits. Values can be
provided via environment variables (preferred) or fall back to the defaults
below. A ``Settings`` instance is intended to be retrieved via ``get_settings``
which caches the object for reuse across the process.

Environment variable prefix: ``CLUSTER_READINESS_`` (e.g.
``CLUSTER_READINESS_DEFAULT_TIMEOUT``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime readiness settings.

    Attributes map directly to environment variables using the
    ``CLUSTER_READINESS_`` prefix (case-insensitive). For example,
    ``default_timeout`` <- ``CLUSTER_READINESS_DEFAULT_TIMEOUT``.
    """

    # Wait defaults
    # Used by ClusterWait.for_service and the builder extensions when no explicit value is given.
    default_timeout: float = Field(
        default=120.0,
        description="Seconds a wait polls before giving up",
    )
    default_poll_interval: float = Field(
        default=0.5,
        description="Seconds to sleep between two attempts of the same wait",
    )
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level used by setup_logging",
    )
    services: dict[str, str] = Field(
        default_factory=dict,
        description="Static service address table, name -> 'host:port' (JSON when set from env)",
    )

    @field_validator("default_timeout", "default_poll_interval")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Durations must be strictly positive."""
        if v <= 0:
            raise ValueError(f"Duration must be greater than zero, got {v}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    model_config = SettingsConfigDict(
        env_prefix="CLUSTER_READINESS_",
        case_sensitive=False,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
