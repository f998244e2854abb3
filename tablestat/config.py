"""Configuration management for tablestat.

Uses pydantic-settings for type-safe environment variable loading. Every field
can be overridden with a ``TABLESTAT_`` prefixed environment variable, e.g.
``TABLESTAT_DEGENERATE_VARIANCE=raise``.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TABLESTAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level used by the CLI",
    )

    # Statistics defaults
    default_quantile: float = Field(
        default=0.25,
        ge=0.01,
        le=0.99,
        description="Quantile step used when a request does not give one",
    )
    fence_multiplier: float = Field(
        default=1.5,
        gt=0.0,
        description="IQR multiplier for Tukey outlier fences",
    )
    percentage_decimals: int = Field(
        default=2,
        ge=0,
        description="Decimal places kept in one-way percentage tables",
    )
    degenerate_variance: Literal["nan", "raise"] = Field(
        default="nan",
        description="How z-scoring treats a column with zero standard deviation",
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
