"""
Centralized configuration for capcompose.

Uses Pydantic BaseSettings for environment variable integration
and validation. All configurable values should be defined here.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (CAPCOMPOSE_*)
3. .env file
4. Default values

Example:
    from capcompose.config import get_config

    config = get_config()
    print(config.method_order)  # From CAPCOMPOSE_METHOD_ORDER or default

    # Override at runtime
    config = get_config(method_order="sorted")
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CapComposeConfig(BaseSettings):
    """
    Central configuration for capcompose.

    All settings can be overridden via environment variables
    prefixed with CAPCOMPOSE_.

    Example:
        export CAPCOMPOSE_METHOD_ORDER=sorted
        export CAPCOMPOSE_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPCOMPOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service identification
    service_name: str = Field(
        default="capcompose",
        description="Service name for build event attribution",
    )

    # Type synthesis
    component_prefix: str = Field(
        default="__",
        description="Prefix for randomly generated component names",
    )
    method_order: Literal["declaration", "sorted"] = Field(
        default="declaration",
        description="Order of capability methods within a composite shape",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level for build events",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Build event output format (json for log pipelines, text for console)",
    )

    # Telemetry
    emit_span_events: bool = Field(
        default=True,
        description="Attach build events to the current OTel span when recording",
    )

    @field_validator("component_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Component prefixes must keep generated names identifier-safe."""
        if v and not (v + "x").isidentifier():
            raise ValueError(f"component_prefix {v!r} is not identifier-safe")
        return v


# Global singleton
_config: Optional[CapComposeConfig] = None


def get_config(**overrides) -> CapComposeConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        CapComposeConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = CapComposeConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
