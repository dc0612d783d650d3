"""
Alpaca API — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-checked settings fail at startup instead of on first use.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for a local MongoDB on the default port.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: mongodb://[user:password@]host[:port][/?options]
    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL"
    )

    # All record collections live in this database
    mongodb_database: str = Field(default="alpaca")

    # Server selection timeout; a down server fails requests after this long
    mongodb_timeout_ms: int = Field(default=5000, ge=100, le=60000)

    # ── API ───────────────────────────────────────────────────────────────
    # First path segment of every record endpoint: /{api_prefix}/{record}
    api_prefix: str = Field(default="api")

    # Reported by GET /{api_prefix}/version
    server_name: str = Field(default="Project Alpaca")
    server_version: str = Field(default="0.1")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("api_prefix")
    @classmethod
    def strip_prefix_slashes(cls, v: str) -> str:
        """Stores the prefix without leading/trailing slashes ("/api/" → "api")."""
        return v.strip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MONGODB_URL and mongodb_url both work
    }


# Singleton instance — imported throughout the application
settings = Settings()
