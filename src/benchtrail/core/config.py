"""Configuration management for benchtrail.

This module provides configuration classes using pydantic-settings
for environment variable management and validation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables with
    the BENCHTRAIL_ prefix.

    Attributes:
        history_path: Path of the persisted history file.
        window_size: Number of preceding points averaged into the baseline.
        tolerance: Allowed relative deviation from the baseline.
        critical_multiplier: Multiplier of the tolerance above which an alert is critical.
        zero_epsilon: Absolute slack used when the baseline is zero.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).

    Example:
        >>> # Set via environment variables:
        >>> # export BENCHTRAIL_TOLERANCE=0.1
        >>> # export BENCHTRAIL_LOG_LEVEL=DEBUG
        >>>
        >>> settings = Settings()
        >>> print(settings.tolerance)
        0.1

    Environment Variables:
        BENCHTRAIL_HISTORY_PATH: History file (default: .benchtrail/history.json)
        BENCHTRAIL_WINDOW_SIZE: Baseline window (default: 5)
        BENCHTRAIL_TOLERANCE: Relative tolerance (default: 0.2)
        BENCHTRAIL_CRITICAL_MULTIPLIER: Critical multiplier (default: 2.0)
        BENCHTRAIL_ZERO_EPSILON: Zero-baseline slack (default: 1e-9)
        BENCHTRAIL_LOG_LEVEL: Logging level (default: WARNING)
    """

    model_config = SettingsConfigDict(
        env_prefix="BENCHTRAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    history_path: str = Field(
        default=".benchtrail/history.json",
        description="Path of the persisted history file",
    )

    # Regression detection
    window_size: int = Field(
        default=5,
        ge=1,
        description="Number of preceding points averaged into the baseline",
    )
    tolerance: float = Field(
        default=0.2,
        ge=0,
        description="Allowed relative deviation from the baseline",
    )
    critical_multiplier: float = Field(
        default=2.0,
        ge=1,
        description="Multiplier of the tolerance above which an alert is critical",
    )
    zero_epsilon: float = Field(
        default=1e-9,
        ge=0,
        description="Absolute slack used when the baseline is zero",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
