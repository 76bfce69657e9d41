"""Configuration management for the spreadsheet query engine.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SPQ_ prefix, or via a .env file in the project root. The query engine
itself never reads the environment: it receives a Settings instance.

Environment Variables:
    SPQ_TYPE_THRESHOLD: Majority fraction for column type inference (default: 0.7)
    SPQ_DEFAULT_RANK_LIMIT: Ranking limit when the query has none (default: 10)
    SPQ_MATERIALIZE_CHUNK_SIZE: Cells per chunk in async materialization (default: 1000)
    SPQ_GRID_CACHE_SIZE: Number of cached grid snapshots, 0 disables (default: 32)
    SPQ_MAX_CELLS: Maximum cells accepted per request (default: 1000000)
    SPQ_MAX_UPLOAD_SIZE_MB: Maximum workbook upload size in MB (default: 10)
    SPQ_LOG_LEVEL: Logging level (default: INFO)
    SPQ_DEBUG: Enable debug mode (default: false)
    SPQ_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SPQ_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SPQ_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SPQ_LOG_LEVEL=DEBUG
        SPQ_DEFAULT_RANK_LIMIT=5
    """

    model_config = SettingsConfigDict(
        env_prefix="SPQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Query Engine Settings
    # =========================================================================

    type_threshold: float = 0.7
    """A column type wins when strictly more than this fraction of values match."""

    default_rank_limit: int = 10
    """Number of rows returned by ranking queries that name no limit."""

    materialize_chunk_size: int = 1000
    """Cells written per chunk before yielding in async materialization."""

    grid_cache_size: int = 32
    """Maximum number of grid snapshots kept in the LRU cache (0 disables)."""

    # =========================================================================
    # Input Limits
    # =========================================================================

    max_cells: int = 1_000_000
    """Maximum number of cells accepted in one request."""

    max_upload_size_mb: int = 10
    """Maximum workbook upload size in megabytes."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("type_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate threshold is in [0.0, 1.0)."""
        if not 0.0 <= v < 1.0:
            raise ValueError(f"type_threshold must be in [0.0, 1.0), got {v}")
        return v

    @field_validator("default_rank_limit", "materialize_chunk_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate count settings are at least 1."""
        if v < 1:
            raise ValueError(f"value must be at least 1, got {v}")
        return v

    @field_validator("grid_cache_size")
    @classmethod
    def validate_cache_size(cls, v: int) -> int:
        """Validate cache size is not negative."""
        if v < 0:
            raise ValueError(f"grid_cache_size must be >= 0, got {v}")
        return v

    @field_validator("max_cells")
    @classmethod
    def validate_max_cells(cls, v: int) -> int:
        """Validate the cell limit is positive."""
        if v < 1:
            raise ValueError(f"max_cells must be at least 1, got {v}")
        return v

    @field_validator("max_upload_size_mb")
    @classmethod
    def validate_upload_size(cls, v: int) -> int:
        """Validate upload size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_upload_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging.

        Returns:
            Dictionary representation of the settings.
        """
        return {
            "type_threshold": self.type_threshold,
            "default_rank_limit": self.default_rank_limit,
            "materialize_chunk_size": self.materialize_chunk_size,
            "grid_cache_size": self.grid_cache_size,
            "max_cells": self.max_cells,
            "max_upload_size_mb": self.max_upload_size_mb,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Emits warnings for configurations that are valid but questionable
    in production.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    if s.grid_cache_size == 0:
        logger.warning(
            "Grid snapshot cache is disabled; every query re-materializes its grid."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"type_threshold={s.type_threshold}, grid_cache_size={s.grid_cache_size}"
    )


# Create the global settings instance
settings = Settings()
