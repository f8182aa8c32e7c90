"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Catalog Source:
--------------
When CATALOG_API_URL is empty the picker searches the local JSON catalog
(PRODUCTS_FILE). Otherwise it queries the remote catalog service.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        catalog_api_url: Base URL of the remote catalog service (empty = local)
        catalog_api_key: Value sent in the x-api-key header
        catalog_timeout_seconds: Transport timeout for catalog requests
        products_file: Path to the local product catalog JSON
        picker_page_size: Products requested per search page
        picker_debounce_ms: Quiet interval before a search query fires
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.picker_page_size)
        10
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Upsell Offer Builder",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # CATALOG SETTINGS
    # =========================================================================
    catalog_api_url: str = Field(
        default="",
        description="Remote catalog base URL; empty uses the local catalog"
    )

    catalog_api_key: str = Field(
        default="",
        description="API key sent to the remote catalog"
    )

    catalog_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Transport timeout for catalog requests"
    )

    products_file: str = Field(
        default="data/products.json",
        description="Path to product catalog JSON"
    )

    # =========================================================================
    # PICKER SETTINGS
    # =========================================================================
    picker_page_size: int = Field(
        default=10,
        ge=1,
        le=250,
        description="Products requested per search page"
    )

    picker_debounce_ms: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Quiet interval before a typed query is searched"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("catalog_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Remove trailing slashes so paths can be appended safely."""
        return value.strip().rstrip("/")

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def uses_remote_catalog(self) -> bool:
        """Check if searches go to the remote catalog service."""
        return bool(self.catalog_api_url)

    @property
    def products_path(self) -> Path:
        """
        Get products file as Path object.

        Returns:
            Path object pointing to products JSON file
        """
        return Path(self.products_file)

    @property
    def picker_debounce_seconds(self) -> float:
        """Get the debounce interval in seconds."""
        return self.picker_debounce_ms / 1000

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"catalog={'remote' if self.uses_remote_catalog else 'local'}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
